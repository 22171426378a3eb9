"""
lopext Constants

This module consolidates the protocol constants shared by the codecs and
calculators, plus the environment-driven settings (read once from `.env`).
Constants are organized by category for easy reference.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

NETWORK_DEFAULTS = {
    'LOPEXT_CHAIN_ID':                 '1',
    'LOPEXT_RPC_URL':                  'http://127.0.0.1:8545',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW MIRROR THE DEPLOYED SETTLEMENT ENGINE AND CALCULATOR
# CONTRACTS. CHANGING THEM MAKES OFF-CHAIN PREVIEWS AND SIGNATURES DIVERGE FROM
# WHAT THE CHAIN EXECUTES.

# ==================================================================================
# INTEGER BOUNDS
# ==================================================================================
UINT256_MAX = 2**256 - 1
INT256_MIN = -(2**255)
INT256_MAX = 2**255 - 1
UINT160_MASK = 2**160 - 1
ADDRESS_LENGTH = 20  # bytes
WORD_SIZE = 32       # bytes


# ==================================================================================
# MAKER TRAITS BIT LAYOUT
# ==================================================================================
NO_PARTIAL_FILLS_FLAG = 255
ALLOW_MULTIPLE_FILLS_FLAG = 254
PRE_INTERACTION_CALL_FLAG = 252
POST_INTERACTION_CALL_FLAG = 251
NEED_CHECK_EPOCH_MANAGER_FLAG = 250
HAS_EXTENSION_FLAG = 249
USE_PERMIT2_FLAG = 248
UNWRAP_WETH_FLAG = 247

ALLOWED_SENDER_OFFSET, ALLOWED_SENDER_BITS = 0, 80
EXPIRATION_OFFSET, EXPIRATION_BITS = 80, 40
NONCE_OR_EPOCH_OFFSET, NONCE_OR_EPOCH_BITS = 120, 40
SERIES_OFFSET, SERIES_BITS = 160, 40


# ==================================================================================
# ORDER HASHING (EIP-712)
# ==================================================================================
LOP_DOMAIN_NAME = "1inch Aggregation Router"
LOP_DOMAIN_VERSION = "6"
# Limit Order Protocol v4 router (same address on every supported chain)
LIMIT_ORDER_PROTOCOL_ADDRESS = "0x111111125421ca6dc452d289314280a0f8842a65"

ORDER_TYPE_STRING = (
    "Order("
    "uint256 salt,"
    "address maker,"
    "address receiver,"
    "address makerAsset,"
    "address takerAsset,"
    "uint256 makingAmount,"
    "uint256 takingAmount,"
    "uint256 makerTraits"
    ")"
)
EIP712_DOMAIN_TYPE_STRING = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)


# ==================================================================================
# CALCULATOR PARAMETERS
# ==================================================================================
SPREAD_DENOMINATOR = 10**9      # 1e9 == no spread
SPREAD_DECIMALS = 7             # "0.5" percent -> 5_000_000 parts per 1e9
ORACLE_TTL = 4 * 60 * 60        # seconds before a feed answer is stale
INVERSE_FLAG = 0x80
DOUBLE_PRICE_FLAG = 0x40
UNISWAP_FEE_TIERS = (500, 3000, 10000)
DEFAULT_UNISWAP_FEE_TIER = 3000
Q96 = 2**96
RANGE_PRICE_SCALE = 10**18

FLASH_LOAN_FEE_BPS = 5          # Aave v3 premium (0.05%)
BPS_DENOMINATOR = 10000

# Schema bounds
MAX_TIMESTAMP_HORIZON = 100 * 365 * 24 * 60 * 60
MIN_VESTING_PERIOD = 60 * 60
MAX_VESTING_PERIOD = 10 * 365 * 24 * 60 * 60
MAX_VESTING_PERIODS = 1000
MAX_VESTING_DURATION = 20 * 365 * 24 * 60 * 60


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LOGGER_DEFAULTS | NETWORK_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Only known literals reach ast.literal_eval.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
