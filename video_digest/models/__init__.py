from .summary import SummaryPoint, SummaryInput, CacheRecord, SaveOutcome, SummaryResult, RecentSummary
from .enums import StoreBackendType, SaveStatus, SummaryStyle
