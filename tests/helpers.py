import numpy as np

from store_map import StoreMap


def make_store(grid, geofences=(), access_points=(), products=()):
    return StoreMap(np.array(grid, dtype=np.int8), geofences, access_points, products)
