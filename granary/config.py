
# ---------------- CONFIG ----------------
SEED = 7
DAYS = 120              # simulated days for the village run
TICKS_PER_DAY = 4       # agent ticks per simulated day

# ----- MARKET TREASURY -----
MARKET_START_MONEY = 1000.0
MAX_UNITS_PER_CALL = 100        # micro-fill ceiling per clear call

# ----- BANDS -----
BAND_WIDTH = 0.15               # lower/upper band = target * (1 -/+ BAND_WIDTH)

# ----- WHEAT -----
WHEAT_PRICE = 1.00
WHEAT_PRICE_FLOOR = 0.50
WHEAT_PRICE_CEILING = 3.00
WHEAT_TARGET = 45
WHEAT_CAPACITY = 200
WHEAT_PREMIUM_MULT = 1.10       # max bid premium when deep below the lower band

# ----- BREAD -----
BREAD_PRICE = 3.00
BREAD_PRICE_FLOOR = 1.50
BREAD_PRICE_CEILING = 8.00
BREAD_TARGET = 50
BREAD_CAPACITY = 200
BREAD_PREMIUM_MULT = 1.15

# ----- SEEDS -----
SEEDS_PRICE = 0.50
SEEDS_PRICE_FLOOR = 0.25
SEEDS_PRICE_CEILING = 2.00
SEEDS_TARGET = 40
SEEDS_CAPACITY = 100
SEEDS_PREMIUM_MULT = 1.05
SEED_RESTOCK_PER_DAY = 10       # exogenous supplier tops seeds up toward target

# ----- BID CURVE -----
PREMIUM_DEPTH_CAP = 0.5         # premium saturates 50% below the lower band
IN_BAND_DISCOUNT = 0.05         # x1.00 at lower band -> x0.95 at upper band
MILD_ZONE_END = 0.25            # excess over upper band where the mild zone ends
MILD_ZONE_MULT = 0.85
STEEP_ZONE_END = 1.0
STEEP_ZONE_MULT = 0.55
FAR_ZONE_SLOPE = 0.25
FAR_ZONE_MIN_MULT = 0.30        # never go below this share of the reference price

# ----- BUY QUANTITY TAPER -----
TAPER_EXCESS_CAP = 0.5          # taper bottoms out at 50% excess over upper band
TAPER_MIN_FRACTION = 0.10       # smallest fraction of remaining capacity offered

# ----- OVERFLOW DISTRESS -----
DISTRESS_BASE = 0.80
DISTRESS_STEEPNESS = 0.5
DISTRESS_MIN_MULT = 0.10

# ----- DECAY -----
DECAY_STABILIZATION_DAYS = 3    # no decay during the first N days
BREAD_DECAY_MIN = 0.005
BREAD_DECAY_MAX = 0.015
WHEAT_DECAY_ENABLED = False
BREAD_DECAY_ENABLED = True

# ----- PRICE DISCOVERY -----
MIN_TRADES_FOR_DISCOVERY = 3
ANCHOR_STRENGTH = 0.5           # lerp weight toward the average clearing price
INVENTORY_NUDGE = 0.02          # max +/- nudge from inventory deviation
GROWTH_PENALTY = 0.01           # extra cut if stock grew while above upper band
MAX_PREMIUM_OVER_CLEARING = 0.05
NO_TRADE_OVERSUPPLY_CUT = 0.02  # flat daily cut without trades above upper band
MAX_DAILY_MOVE = 0.05

# ----- HYSTERESIS (retained, inert by default) -----
HYSTERESIS_ENABLED = False

# ----- SEASONAL YIELD -----
YIELD_PERIOD_DAYS = 28
YIELD_MID = 1.00
YIELD_MAX = 1.10
YIELD_MIN_BOUND = 0.90
YIELD_MAX_BOUND = 1.10

# ----- DEMAND SHOCK -----
DEMAND_SHOCK_PROB = 0.05
DEMAND_SHOCK_EXTRA_FOOD = 1     # extra bread per affected consumer
DEMAND_SHOCK_FRACTION = 0.3     # share of consumers affected

# ----- SEED SHOCK -----
SEED_SHOCK_PROB = 0.03
SEED_SHOCK_MULT = 0.5
SEED_SHOCK_MIN_DAYS = 3
SEED_SHOCK_MAX_DAYS = 7

# ----- VILLAGE (simulation driver) -----
N_FARMS = 4
N_BAKERIES = 1
N_HOUSEHOLDS = 12
FARM_START_MONEY = 40.0
BAKERY_START_MONEY = 120.0
HOUSEHOLD_INCOME = 3.5          # stipend per household per day
SEEDS_PER_PLANTING = 5
WHEAT_PER_SEED = 3              # base harvest per seed, before the yield multiplier
WHEAT_PER_BREAD = 1
BAKERY_DAILY_OUTPUT = 12
BREAD_PER_HOUSEHOLD = 1         # daily food requirement
FOOD_RESERVE = 2                # bread a baker keeps back for its own table
