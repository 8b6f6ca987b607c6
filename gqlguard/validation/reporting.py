"""Shared accept/reject handling for limit violations."""

from typing import List
import logging

from graphql import DocumentNode, GraphQLError

from ..config import LimitConfig

logger = logging.getLogger(__name__)


def settle(config: LimitConfig, document: DocumentNode, errors: List[GraphQLError]) -> List[GraphQLError]:
    """
    Run the configured callbacks and decide which errors reach the client.

    Args:
        config: Limit configuration that produced the errors
        document: The validated document
        errors: Violations found, empty if the document passed

    Returns:
        Errors to report, empty when propagation is disabled
    """
    if not errors:
        for callback in config.on_accept:
            callback(config, document)
        return []

    for error in errors:
        logger.info(f"Rejected query: {error.message}")
        for callback in config.on_reject:
            callback(config, error)

    if not config.propagate_on_rejection:
        logger.debug(f"Suppressed {len(errors)} limit violation(s), propagation disabled")
        return []
    return errors
