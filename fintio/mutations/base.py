"""
Mutation Services - Shared Write Path

Every create/update/delete goes through ResourceMutations.send():

1. Send the request (JSON body, Content-Type: application/json)
2. Non-2xx or no answer -> raise MutationError, invalidate NOTHING
3. 2xx -> invalidate every list key of the resource for the budget
   (all budgets when the budget is unknown), the item's own key on
   update, and any dependent resources
4. Return the parsed body

CRITICAL: Invalidation happens before the caller sees success.
Write failures are raised, never swallowed - the caller decides how
to tell the user.
"""

from typing import Any, Optional, Sequence, Type

from pydantic import ValidationError

from fintio.cache import (
    KeyPredicate,
    Resource,
    ResponseCache,
    match_any,
    match_item,
    match_resource,
)
from fintio.models.finance import ApiModel
from fintio.services.api import (
    ApiError,
    BudgetApiClient,
    ResponseParseError,
    TransportError,
    error_detail,
)
from fintio.telemetry import get_logger


class MutationError(ApiError):
    """A create/update/delete did not succeed."""

    def __init__(
        self,
        operation: str,
        resource: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.operation = operation
        self.resource = resource
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Failed to {operation} {resource}")


class ResourceMutations:
    """
    Base class for one resource's write operations.

    Subclasses set:
        resource: The list endpoint being written
        label: Human name used in error messages ("savings goal")
        dependents: Other resources whose cached reads this write changes
    """

    resource: Resource
    label: str = "resource"
    dependents: tuple[Resource, ...] = ()

    def __init__(self, api: BudgetApiClient, cache: ResponseCache):
        self._api = api
        self._cache = cache
        self._logger = get_logger("fintio.mutations")

    async def send(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Optional[Any] = None,
        budget_id: Optional[str] = None,
        item_id: Optional[str] = None,
        label: Optional[str] = None,
        resource: Optional[Resource] = None,
        dependents: Optional[Sequence[Resource]] = None,
    ) -> Any:
        """
        Perform one write and invalidate what it touched.

        Args:
            operation: Verb for error messages ("create", "update"...)
            method: HTTP method
            path: Request path
            payload: JSON body, if any
            budget_id: Budget the write belongs to, when known
            item_id: Record id whose own key should also be invalidated
            label: Overrides the class label in error messages
            resource: Overrides the class resource for invalidation
            dependents: Overrides the class dependents for invalidation

        Returns:
            The parsed JSON body, or {"success": True} for an empty body

        Raises:
            MutationError: Non-2xx status or no HTTP answer
            ResponseParseError: 2xx with a body that is not JSON
        """
        label = label or self.label

        try:
            response = await self._api.request(method, path, payload)
        except TransportError as e:
            self._logger.error(
                "mutation_failed",
                operation=operation,
                resource=label,
                error=str(e),
            )
            raise MutationError(operation, label) from e

        if not response.is_success:
            detail = error_detail(response)
            self._logger.warning(
                "mutation_failed",
                operation=operation,
                resource=label,
                status=response.status_code,
                detail=detail,
            )
            raise MutationError(operation, label, response.status_code, detail)

        # The server has applied the write: invalidate even if the body is bad
        unreadable = False
        try:
            if not response.content:
                return {"success": True}
            return self._api.parse_json(response)
        except ResponseParseError:
            unreadable = True
            raise
        finally:
            invalidated = self._cache.invalidate(
                self._invalidation_predicate(
                    resource or self.resource,
                    budget_id,
                    item_id,
                    self.dependents if dependents is None else dependents,
                )
            )
            if unreadable:
                self._logger.warning(
                    "mutation_reply_unreadable",
                    operation=operation,
                    resource=label,
                    status=response.status_code,
                    budget_id=budget_id,
                    item_id=item_id,
                    invalidated=len(invalidated),
                )
            else:
                self._logger.info(
                    "mutation_succeeded",
                    operation=operation,
                    resource=label,
                    budget_id=budget_id,
                    item_id=item_id,
                    invalidated=len(invalidated),
                )

    def _invalidation_predicate(
        self,
        resource: Resource,
        budget_id: Optional[str],
        item_id: Optional[str],
        dependents: Sequence[Resource] = (),
    ) -> KeyPredicate:
        predicates = [match_resource(resource, budget_id)]
        predicates.extend(match_resource(r, budget_id) for r in dependents)
        if item_id is not None:
            predicates.append(match_item(resource, item_id))
        return match_any(*predicates)

    @staticmethod
    def to_entity(
        body: Any,
        model: Type[ApiModel],
        envelope: Optional[str] = None,
    ) -> Any:
        """
        Parse a write response into an entity model.

        Some endpoints wrap the record ({"account": {...}}), some return it
        bare; the envelope is unwrapped when present.
        """
        if envelope and isinstance(body, dict) and envelope in body:
            body = body[envelope]
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise ResponseParseError(
                f"Unexpected {model.__name__} response: {e}"
            ) from e
