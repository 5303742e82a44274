"""Build method records from API groupings."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kube_discovery_mcp.domains.methods.models import ApiGrouping, MethodRecord
from kube_discovery_mcp.domains.methods.naming import (
    compact_identifier,
    derive_action,
    derive_resource_type,
    derive_scope,
    infer_parameters,
)
from kube_discovery_mcp.domains.methods.usage import (
    build_example,
    build_input_schema,
    build_output_schema,
    describe_method,
    return_type_name,
)

logger = logging.getLogger(__name__)

# Configures the client rather than calling the API.
NON_OPERATIONAL_METHOD = "setdefaultauthentication"


def is_operational(method_name: str) -> bool:
    """Whether a method name is a real API operation."""
    if not method_name or method_name.startswith("_"):
        return False
    return compact_identifier(method_name) != NON_OPERATIONAL_METHOD


class MethodExtractor:
    """Turns API groupings into method records."""

    def __init__(self, groupings: Iterable[ApiGrouping]) -> None:
        self._groupings = list(groupings)

    @property
    def groupings(self) -> list[ApiGrouping]:
        return self._groupings

    def build_record(self, grouping: ApiGrouping, method_name: str) -> MethodRecord:
        resource_type = derive_resource_type(method_name)
        action = derive_action(method_name)
        scope = derive_scope(method_name)
        parameters = infer_parameters(method_name, grouping.grouping_id, action, scope)
        type_name = return_type_name(grouping.grouping_id, resource_type, action)

        return MethodRecord(
            grouping_id=grouping.grouping_id,
            method_name=method_name,
            resource_type=resource_type,
            action=action,
            scope=scope,
            parameters=parameters,
            description=describe_method(method_name, resource_type, grouping.description),
            example=build_example(
                grouping.grouping_id, method_name, resource_type, action, parameters
            ),
            input_schema=build_input_schema(parameters),
            output_schema=build_output_schema(resource_type, action, type_name),
        )

    def extract(self) -> list[MethodRecord]:
        """Build records for every operational method in every grouping.

        Duplicate raw-response variants are kept; the search index drops them.
        """
        records: list[MethodRecord] = []
        for grouping in self._groupings:
            seen: set[str] = set()
            for method_name in grouping.method_names:
                if method_name in seen or not is_operational(method_name):
                    continue
                seen.add(method_name)
                records.append(self.build_record(grouping, method_name))

        logger.info(
            f"Extracted {len(records)} methods from {len(self._groupings)} API groupings"
        )
        return records
