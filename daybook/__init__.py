"""Daybook core library — record engine shared by the journaling apps.

Public API re-exports for convenient imports:
    from daybook import build_services, RecordStore, RecordFilter, ...
"""

# Workspace & settings
from daybook.workspace import (
    workspace_root,
    settings_path,
    data_path,
    exports_dir,
    load_settings,
    save_settings,
    get_user_timezone,
    now_local,
    today_local,
    today_str,
)

# Errors
from daybook.errors import (
    DaybookError,
    ValidationError,
    NotFoundError,
    EmptyCandidatesError,
    PersistenceError,
)

# Models
from daybook.models import (
    Record,
    Settings,
    ChecklistProgress,
    StatisticsSnapshot,
    StreakRun,
    WheelSpin,
)

# Kinds
from daybook.kinds import (
    RecordKind,
    KINDS,
    get_kind,
)

# Persistence
from daybook.repository import JsonRecordRepository, MemoryRecordRepository

# Store
from daybook.store import RecordStore, validate_record

# Query
from daybook.query import (
    RecordFilter,
    filter_records,
    sort_records,
    query_records,
)

# Aggregation
from daybook.analytics import (
    category_distribution,
    current_streak,
    history_span,
    best_streak,
    streak_runs,
    monthly_completion,
    weekly_completion,
    weekly_pattern,
    monthly_counts,
    compute_snapshot,
)

# Random selection
from daybook.randomizer import pick, segment_index, spin_wheel

# Export
from daybook.export import build_export, write_export

# View-model & services
from daybook.viewmodel import RecordListModel
from daybook.services import Services, build_services
from daybook.log import setup_logging
