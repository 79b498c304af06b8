# config.py

# --- Grid size and cell codes ---
GRID_SIZE = 10
CELL_TYPE_PATH = 0
CELL_TYPE_SHELF = 1

# --- Default store layout (cell coordinates are (x, y)) ---
ENTRANCE_CELL = (1, 0)
AISLE_COLUMNS = (2, 3, 6, 7)
AISLE_ROWS = (2, 8)  # inclusive
CENTRAL_AISLE_ROW = 5
CENTRAL_AISLE_COLUMNS = (1, 8)  # inclusive
# (x, y, width, height)
SHELVES = (
    (1, 2, 1, 3),
    (4, 2, 1, 3),
    (1, 6, 1, 3),
    (4, 6, 1, 3),
)

ACCESS_POINTS = (
    {'identifier': '22:08:aa:e2:be:e2', 'x': 1, 'y': 1},  # router
    {'identifier': '92:1c:65:cb:92:be', 'x': 8, 'y': 1},  # tablet
    {'identifier': 'e2:c2:64:65:bc:51', 'x': 4, 'y': 8},  # laptop
)

GEOFENCES = (
    {'label': 'Aisle 1', 'minX': 2, 'maxX': 3, 'minY': 2, 'maxY': 8},
    {'label': 'Aisle 2', 'minX': 6, 'maxX': 7, 'minY': 2, 'maxY': 8},
    {'label': 'Central Area', 'minX': 4, 'maxX': 5, 'minY': 4, 'maxY': 6},
)

PRODUCTS = (
    {'name': 'Milk', 'zone': 'Aisle 1', 'x': 2, 'y': 3},
    {'name': 'Bread', 'zone': 'Aisle 1', 'x': 2, 'y': 7},
    {'name': 'Apples', 'zone': 'Aisle 2', 'x': 6, 'y': 3},
    {'name': 'Pasta', 'zone': 'Aisle 2', 'x': 6, 'y': 7},
    {'name': 'Cheese', 'zone': 'Central Area', 'x': 4, 'y': 5},
)

# --- Path loss model used for localization ---
REFERENCE_POWER_DBM = -50    # RSSI at the reference distance of one cell
PATH_LOSS_SCALE = 20         # 10 * n with n = 2 (free space)

# --- Scan simulation ---
NOISE_STD_DEV_DB = 1.0
SHELF_ATTENUATION_DB = 2.0   # per shelf cell crossed
MIN_RSSI_THRESHOLD = -95

# --- Tracking loop ---
SCAN_INTERVAL_S = 2.0

# --- Path requests ---
MAX_SEARCH_TIME_S = 1.0

# --- HTTP server ---
SERVER_HOST = '0.0.0.0'
SERVER_PORT = 5000

# --- Logging ---
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# --- Visualization colors ---
COLOR_PATH_ON_MAP = 'white'
COLOR_SHELF_ON_MAP = 'gray'
COLOR_AP_MARKER = 'red'
COLOR_PRODUCT_MARKER = 'orange'
COLOR_POSITION_MARKER = 'blue'
COLOR_TARGET_MARKER = 'yellow'
COLOR_PATH_LINE = 'cyan'
GEOFENCE_COLORS = ('tab:green', 'tab:purple', 'tab:olive', 'tab:brown')
