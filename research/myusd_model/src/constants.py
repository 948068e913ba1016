# Fixed point scale factors
PRECISION = 1_000_000_000_000_000_000  # 1e18 for prices, exchange rate and ratios
BPS_SCALE = 10_000  # Basis points (100% = 10000)
MAX_UINT256 = 2**256 - 1

# Time constants
SECONDS_PER_YEAR = 365 * 24 * 60 * 60  # 365 days * 24 hours * 60 minutes * 60 seconds

# Position constants
COLLATERAL_RATIO_THRESHOLD = 150  # 150% minimum collateralization, in percent
LIQUIDATOR_REWARD_RATE = 10       # 10% bonus on liquidated collateral, in percent
PERCENT_SCALE = 100

# Debt share constants
INITIAL_EXCHANGE_RATE = PRECISION  # one share = one stablecoin unit
MAX_POSITION_RATIO = MAX_UINT256   # ratio reported for debt-free positions
