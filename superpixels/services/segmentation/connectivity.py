"""
Connectivity enforcement for superpixel labels.

Two independent passes, one per algorithm:

    merge_small_fragments   SLIC. Relabels every 4-connected component and
                            folds components of at most S*S/4 pixels into a
                            neighbouring, already labelled component.
    fix_isolated_pixels     SNIC. Spot fix for stray pixels that share their
                            label with none of their 4 neighbours.

Both scan neighbours West-North-East-South.
"""

import numpy as np

from .utils import NEIGHBORS, allocate, get_in_bounds, index_in_bounds

UNASSIGNED = -1


def merge_small_fragments(width, height, s, labels):
    """
    Relabel disjoint label fragments (SLIC).

    Pixels are visited in raster order; each unvisited pixel starts a
    breadth-first search over 4-connected pixels sharing its old label.
    While the component grows, the last committed label seen next to
    it (other than its own) is remembered. A component of at most
    S*S/4 pixels takes that label; larger ones keep a fresh sequential
    label.

    Returns a new int64 label array.
    """
    threshold = (s * s) // 4
    old_labels = np.asarray(labels).tolist()
    length = len(old_labels)
    new_labels = allocate(length, UNASSIGNED, np.int64).tolist()

    neighbor_label = 0
    new_label = 0

    for y in range(height):
        for x in range(width):
            start = y * width + x
            if new_labels[start] != UNASSIGNED:
                continue

            old_label = old_labels[start]
            new_labels[start] = new_label

            # Frontier doubles as the member list for relabelling
            members = [(x, y)]
            head = 0
            while head < len(members):
                px, py = members[head]
                head += 1
                for dx, dy in NEIGHBORS:
                    i = index_in_bounds(width, height, px + dx, py + dy, length)
                    if i is None:
                        continue
                    assigned = new_labels[i]
                    if assigned == UNASSIGNED:
                        if old_labels[i] == old_label:
                            new_labels[i] = new_label
                            members.append((px + dx, py + dy))
                    elif assigned != new_label:
                        neighbor_label = assigned

            if len(members) <= threshold:
                for mx, my in members:
                    new_labels[my * width + mx] = neighbor_label
                continue

            new_label += 1

    return np.asarray(new_labels, dtype=np.int64)


def fix_isolated_pixels(width, height, labels):
    """
    Relabel pixels whose label matches none of their neighbours (SNIC).

    Single raster pass; fixes are visible to the pixels visited after
    them. Such a pixel takes the label of its first in-bounds
    neighbour, West-North-East-South.

    Returns a new int64 label array.
    """
    grid = np.asarray(labels).tolist()

    for y in range(height):
        for x in range(width):
            i = y * width + x
            neighbors = [
                get_in_bounds(width, height, x + dx, y + dy, grid)
                for dx, dy in NEIGHBORS
            ]
            if grid[i] in neighbors:
                continue
            for n in neighbors:
                if n is not None:
                    grid[i] = n
                    break

    return np.asarray(grid, dtype=np.int64)
