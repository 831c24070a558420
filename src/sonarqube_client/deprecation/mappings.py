"""Built-in compatibility mappings for SonarQube API v1 -> v2 migrations."""

from __future__ import annotations

from typing import Any

from sonarqube_client.deprecation.bridge import ApiMapping

# v1 paging parameter -> v2 name
_USERS_SEARCH_PARAM_RENAMES = {
    "ps": "pageSize",
    "p": "page",
}


def users_search_params_v1_to_v2(params: dict[str, Any] | None) -> dict[str, Any]:
    """Rename v1 paging parameters (``ps``, ``p``) to their v2 names."""
    v2_params = dict(params or {})
    for old, new in _USERS_SEARCH_PARAM_RENAMES.items():
        if old in v2_params:
            v2_params[new] = v2_params.pop(old)
    return v2_params


def users_search_result_v2_to_v1(result: Any) -> Any:
    """Expose the v2 ``users`` list under the v1 ``items`` key as well."""
    if isinstance(result, dict) and "users" in result:
        return {**result, "items": result["users"]}
    return result


USERS_V1_TO_V2_MAPPINGS: list[ApiMapping] = [
    ApiMapping(
        old_api="users.search",
        new_api="users.searchV2",
        transformer=users_search_params_v1_to_v2,
        result_transformer=users_search_result_v2_to_v1,
    ),
]
