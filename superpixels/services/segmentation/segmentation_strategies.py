from .errors import ClusteringError
from .growth import growth_cluster
from .iterative import iterative_cluster

SEGMENT_REGISTRY = {}


def register_segment(name):
    def decorator(cls):
        SEGMENT_REGISTRY[name] = cls()
        return cls
    return decorator


class SegmentationStrategy:
    def segment(self, colors, width, height, k, m, iterations=None):
        raise NotImplementedError


def get_strategy(name):
    strategy = SEGMENT_REGISTRY.get(str(name).strip().lower())
    if strategy is None:
        raise ClusteringError("Invalid algorithm")
    return strategy


# =====================================================================
# 1. SNIC (non-iterative, priority-queue growth)
# =====================================================================

@register_segment("snic")
class GrowthClusteringSeg(SegmentationStrategy):
    """Labels start at 1. `iterations` is ignored, SNIC is single pass."""

    def segment(self, colors, width, height, k, m, iterations=None):
        return growth_cluster(k, m, width, height, colors)


# =====================================================================
# 2. SLIC (iterative assign/update)
# =====================================================================

@register_segment("slic")
class IterativeClusteringSeg(SegmentationStrategy):
    """Labels start at 0."""

    def segment(self, colors, width, height, k, m, iterations=None):
        return iterative_cluster(k, m, width, height, iterations, colors)
