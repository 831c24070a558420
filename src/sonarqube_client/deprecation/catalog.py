"""Known deprecations of the SonarQube Web API surface.

The migration CLI registers these before analyzing usage, so call sites
reported by a scanner can be matched without importing the resource
clients themselves.
"""

from __future__ import annotations

from sonarqube_client.deprecation.metadata import DeprecationMetadata, MetadataRegistry, MigrationExample

USERS_MIGRATION_GUIDE = (
    "Replace search() with searchV2(). Paging parameters ps/p become pageSize/page "
    "and results are listed under 'users' instead of 'items'."
)

BUILTIN_DEPRECATIONS: list[DeprecationMetadata] = [
    DeprecationMetadata(
        api="users.search()",
        deprecated_since="10.8",
        removal_date="2025-08-13",
        replacement="users.searchV2()",
        reason="SonarQube API v1 endpoint deprecated since 10.8",
        examples=[
            MigrationExample(
                before='client.users.search().query("john").page_size(50).execute()',
                after='client.users.searchV2().query("john").page_size(50).execute()',
                description="Paging parameters ps/p become pageSize/page",
            ),
        ],
        breaking_changes=["Response lists users under 'users' instead of 'items'"],
        tags=["users", "v1"],
        migration_guide=USERS_MIGRATION_GUIDE,
        automatic_migration=True,
    ),
    DeprecationMetadata(
        api="users.searchAll()",
        deprecated_since="10.8",
        removal_date="2025-08-13",
        replacement="users.searchV2().all()",
        reason="SonarQube API v1 endpoint deprecated since 10.8",
        tags=["users", "v1"],
        migration_guide=USERS_MIGRATION_GUIDE,
    ),
    DeprecationMetadata(
        api="components.searchLegacy()",
        deprecated_since="6.3",
        removal_date="9.0.0",
        replacement="components.search() or components.tree()",
        reason="The legacy search endpoint is replaced by the search() builder or tree() since 6.3",
        tags=["components"],
    ),
    DeprecationMetadata(
        api="projects.bulkUpdateKey()",
        deprecated_since="7.6",
        removal_date="8.0.0",
        replacement="projects.updateKey()",
        reason="Use updateKey() for individual project key updates",
        tags=["projects"],
        automatic_migration=False,
    ),
    DeprecationMetadata(
        api="metrics.domains()",
        deprecated_since="7.7",
        removal_date="7.7",
        reason="This endpoint has been deprecated and will be removed.",
        tags=["metrics"],
    ),
    DeprecationMetadata(
        api="permissions.searchGlobalPermissions()",
        deprecated_since="6.5",
        removal_date="6.5",
        reason="The endpoint was removed from SonarQube.",
        tags=["permissions", "removed"],
    ),
    DeprecationMetadata(
        api="permissions.searchProjectPermissions()",
        deprecated_since="6.5",
        removal_date="6.5",
        reason="The endpoint was removed from SonarQube.",
        tags=["permissions", "removed"],
    ),
    DeprecationMetadata(
        api="qualityProfiles.exporters()",
        deprecated_since="10.8",
        removal_date="2025-03-18",
        reason="This endpoint will be removed.",
        tags=["quality-profiles"],
    ),
    DeprecationMetadata(
        api="qualityProfiles.importers()",
        deprecated_since="10.8",
        removal_date="2025-03-18",
        reason="This endpoint will be removed.",
        tags=["quality-profiles"],
    ),
    DeprecationMetadata(
        api="system.health()",
        deprecated_since="10.6",
        removal_date="TBD",
        replacement="system.getHealthV2()",
        reason="v1 endpoint deprecated in favor of REST-compliant v2 API",
        migration_guide="Replace health() with getHealthV2(). The v2 API returns node health for clustered setups.",
        tags=["system", "v1"],
        automatic_migration=True,
    ),
    DeprecationMetadata(
        api="UserPropertiesClient",
        deprecated_since="6.3",
        removal_date="2017-06-05",
        replacement="favorites and notifications APIs",
        reason="The user_properties API was removed in SonarQube 6.3",
        tags=["user-properties", "removed"],
    ),
]


def register_builtin_deprecations(registry: MetadataRegistry) -> int:
    """Register the built-in catalog; returns the number of entries."""
    for entry in BUILTIN_DEPRECATIONS:
        registry.register(entry)
    return len(BUILTIN_DEPRECATIONS)
