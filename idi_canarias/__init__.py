from .catalog import CATALOG, EntityCatalog
from .matcher import DuplicatePolicy, find_observation, observation_value, resolve_match
from .metrics import per_member_average, rank, share_of_total, yoy_change
from .sectors import Sector
from .text_norm import normalize, parse_number

__version__ = "1.0.0"
