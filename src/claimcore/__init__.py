from .tristate import Tristate
from .config import ClaimCoreConfig, DeletionPolicy, LogLevel, WildernessBounds, load_config_from_env
from .contexts import (
    ANY_SOURCE,
    Context,
    ContextSet,
    SourceContextRegistry,
    claim_context,
    claim_default_context,
    claim_override_context,
    context_set,
    world_context,
)
from .exceptions import (
    ClaimCoreError,
    ClaimHierarchyError,
    ClaimNotFoundError,
    ConfigurationError,
    ErrorRegistry,
    InvalidContextError,
    InvalidFlagError,
    InvalidTristateError,
    NoTransferableOwnerError,
    PermissionDeniedError,
    StorageError,
    error_registry,
    register_error,
)
from .store import FlagStores, PermissionStore
from .layers import FlagLayer
from .interfaces import ClaimAccessPolicy, ClaimStorage, IdentityResolver, NullClaimStorage, Subject
from .permissions import (
    CAPABILITY_INHERITANCE,
    ROLE_PROFILES,
    Capabilities,
    EditDecision,
    SubjectRole,
    can_edit_flag,
    can_transfer_claim,
    can_view_claim_info,
    expand_capabilities,
    require_flag_edit,
)
from .subjects import ADMIN_USER_UUID, ConsoleSubject, PlayerSubject, StaticIdentityResolver
from .claims import (
    Claim,
    ClaimData,
    ClaimType,
    ClaimWorldManager,
    Location,
    OwnerAccessPolicy,
    Vector3i,
)
from .flags import DEFAULT_FLAGS, FlagCatalog, FlagDefinition, FlagResolver, FlagRow, FlagScope, default_catalog
from .info import ClaimInfo
from .service import ClaimFlagService, get_claim_service, reset_claim_service
from .logging import (
    ClaimLogFormatter,
    ClaimLoggerAdapter,
    get_claim_logger,
    safe_log_value,
    safe_preview,
    setup_logging,
)

__all__ = [
    'Tristate',
    'ClaimCoreConfig',
    'DeletionPolicy',
    'LogLevel',
    'WildernessBounds',
    'load_config_from_env',
    'ANY_SOURCE',
    'Context',
    'ContextSet',
    'SourceContextRegistry',
    'claim_context',
    'claim_default_context',
    'claim_override_context',
    'context_set',
    'world_context',
    'ClaimCoreError',
    'ClaimHierarchyError',
    'ClaimNotFoundError',
    'ConfigurationError',
    'ErrorRegistry',
    'InvalidContextError',
    'InvalidFlagError',
    'InvalidTristateError',
    'NoTransferableOwnerError',
    'PermissionDeniedError',
    'StorageError',
    'error_registry',
    'register_error',
    'FlagStores',
    'PermissionStore',
    'FlagLayer',
    'ClaimAccessPolicy',
    'ClaimStorage',
    'IdentityResolver',
    'NullClaimStorage',
    'Subject',
    'CAPABILITY_INHERITANCE',
    'ROLE_PROFILES',
    'Capabilities',
    'EditDecision',
    'SubjectRole',
    'can_edit_flag',
    'can_transfer_claim',
    'can_view_claim_info',
    'expand_capabilities',
    'require_flag_edit',
    'ADMIN_USER_UUID',
    'ConsoleSubject',
    'PlayerSubject',
    'StaticIdentityResolver',
    'Claim',
    'ClaimData',
    'ClaimType',
    'ClaimWorldManager',
    'Location',
    'OwnerAccessPolicy',
    'Vector3i',
    'DEFAULT_FLAGS',
    'FlagCatalog',
    'FlagDefinition',
    'FlagResolver',
    'FlagRow',
    'FlagScope',
    'default_catalog',
    'ClaimInfo',
    'ClaimFlagService',
    'get_claim_service',
    'reset_claim_service',
    'ClaimLogFormatter',
    'ClaimLoggerAdapter',
    'get_claim_logger',
    'safe_log_value',
    'safe_preview',
    'setup_logging',
]
