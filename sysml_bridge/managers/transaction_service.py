"""
TransactionService - element creation and cloning inside design-model transactions.

Mapping rules never write to the live design model directly: they create new
elements and clone existing ones through this service, inside a
caller-owned transaction. Commit swaps clones into the live model and places
new, uncontained elements; rollback restores the snapshot taken at begin.

Usage:
    tx = TransactionService(design_model, stereotype_service)

    with tx.transaction():
        block = tx.create(ElementKind.BLOCK, "Tank")
        live = tx.clone_element(existing_block)
    # committed on success, rolled back on exception
"""

import logging
import uuid
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Generator, List, Optional, Union

from ..core.design_model import DesignModel, DesignSnapshot
from ..core.stereotypes import StereotypeService
from ..models.design import (
    Class,
    DataType,
    DesignElement,
    ElementKind,
    Enumeration,
    EnumerationLiteral,
    InstanceSpecification,
    Interface,
    InterfaceRealization,
    Literal,
    LiteralKind,
    Port,
    Property,
    Requirement,
    Stereotype,
    Usage,
    walk,
)
from ..models.mapping import LookupResult
from .history_service import ChangeKind, LocalExchangeHistoryService

logger = logging.getLogger(__name__)


# ============================================================================
# Enums and Data Classes
# ============================================================================

class TransactionStatus(Enum):
    """Transaction lifecycle states."""
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class Transaction:
    """Represents an active transaction."""
    id: str
    snapshot: DesignSnapshot
    created: List[DesignElement] = field(default_factory=list)
    clones: Dict[str, DesignElement] = field(default_factory=dict)
    originals: Dict[str, DesignElement] = field(default_factory=dict)
    reference_data: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: TransactionStatus = TransactionStatus.ACTIVE
    rollback_only: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CommitResult:
    """Result of a transaction commit."""
    transaction_id: str
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    rolled_back: bool = False


# ============================================================================
# Exceptions
# ============================================================================

class TransactionError(Exception):
    """Base exception for transaction errors."""
    pass


class TransactionAlreadyActive(TransactionError):
    """A transaction is already open on the design model."""
    pass


class TransactionNotActive(TransactionError):
    """No transaction is open."""
    pass


# ============================================================================
# Element factories
# ============================================================================

def _stereotyped(factory: Callable[..., DesignElement], stereotype: Optional[Stereotype] = None):
    def create(name: str) -> DesignElement:
        element = factory(name=name)
        if stereotype is not None:
            element.applied_stereotypes.append(stereotype.value)
        return element
    return create


ELEMENT_FACTORIES: Dict[ElementKind, Callable[[str], DesignElement]] = {
    ElementKind.BLOCK: _stereotyped(Class, Stereotype.BLOCK),
    ElementKind.PART_PROPERTY: _stereotyped(Property, Stereotype.PART_PROPERTY),
    ElementKind.VALUE_PROPERTY: _stereotyped(Property, Stereotype.VALUE_PROPERTY),
    ElementKind.PORT: _stereotyped(Port, Stereotype.PORT_PROPERTY),
    ElementKind.INTERFACE: _stereotyped(Interface),
    ElementKind.VALUE_TYPE: _stereotyped(DataType, Stereotype.VALUE_TYPE),
    ElementKind.ENUMERATION: _stereotyped(Enumeration, Stereotype.VALUE_TYPE),
    ElementKind.ENUMERATION_LITERAL: _stereotyped(EnumerationLiteral),
    ElementKind.UNIT: _stereotyped(InstanceSpecification, Stereotype.UNIT),
    ElementKind.USAGE: _stereotyped(Usage),
    ElementKind.INTERFACE_REALIZATION: _stereotyped(InterfaceRealization),
    ElementKind.REQUIREMENT: _stereotyped(Requirement, Stereotype.REQUIREMENT),
}

LITERAL_KINDS: Dict[ElementKind, LiteralKind] = {
    ElementKind.LITERAL_REAL: LiteralKind.REAL,
    ElementKind.LITERAL_INTEGER: LiteralKind.INTEGER,
    ElementKind.LITERAL_UNLIMITED_NATURAL: LiteralKind.UNLIMITED_NATURAL,
    ElementKind.LITERAL_BOOLEAN: LiteralKind.BOOLEAN,
    ElementKind.LITERAL_STRING: LiteralKind.STRING,
}


# ============================================================================
# TransactionService
# ============================================================================

class TransactionService:
    """
    Creates and clones design elements within a transaction.

    One transaction at a time; concurrent passes must be serialized by the
    caller.
    """

    def __init__(
        self,
        design_model: DesignModel,
        stereotype_service: Optional[StereotypeService] = None,
        history: Optional[LocalExchangeHistoryService] = None,
    ):
        self.design_model = design_model
        self.stereotype_service = stereotype_service or StereotypeService()
        self.history = history
        self._current: Optional[Transaction] = None

    # ========================================================================
    # Transaction lifecycle
    # ========================================================================

    @property
    def is_active(self) -> bool:
        return self._current is not None and self._current.status == TransactionStatus.ACTIVE

    def begin(self, metadata: Optional[Dict] = None) -> str:
        """
        Begin a transaction, snapshotting the design model.

        Returns:
            transaction_id: UUID for this transaction

        Raises:
            TransactionAlreadyActive: If a transaction is already open
        """
        if self.is_active:
            raise TransactionAlreadyActive(
                f"Transaction {self._current.id} is already active"
            )

        tx_id = str(uuid.uuid4())
        self._current = Transaction(
            id=tx_id,
            snapshot=self.design_model.create_snapshot(label=f"tx-{tx_id}"),
            metadata=metadata or {},
        )

        logger.info(f"Transaction {tx_id} started on design model {self.design_model.name}")
        return tx_id

    def commit(self) -> CommitResult:
        """
        Apply created and cloned elements to the live design model.

        Clones replace the live element with the same id. Created elements
        that nothing contains are added to the data package (reference data)
        or the root package.

        A transaction marked rollback-only is rolled back instead, and the
        result has ``rolled_back`` set.

        Raises:
            TransactionNotActive: If no transaction is open
        """
        transaction = self._require_active()

        if transaction.rollback_only:
            self.rollback()
            return CommitResult(transaction_id=transaction.id, rolled_back=True)

        result = CommitResult(transaction_id=transaction.id)

        for clone in transaction.clones.values():
            if not self.design_model.replace_element(clone):
                self.design_model.add_to_root(clone)
            result.updated.append(clone.id)
            if self.history is not None:
                self.history.append_update(clone, transaction.originals.get(clone.id))

        contained = set()
        for element in transaction.created:
            contained.update(child.id for child in walk(element) if child is not element)

        live = {element.id for element in walk(self.design_model.root)}

        for element in transaction.created:
            if element.id not in live and element.id not in contained:
                if element.id in transaction.reference_data:
                    self.design_model.add_to_data_package(element)
                else:
                    self.design_model.add_to_root(element)
            result.created.append(element.id)
            if self.history is not None:
                self.history.append(element, ChangeKind.CREATE)

        transaction.status = TransactionStatus.COMMITTED
        self._current = None

        logger.info(
            f"Transaction {transaction.id} committed "
            f"({len(result.created)} created, {len(result.updated)} updated)"
        )
        return result

    def rollback(self) -> None:
        """
        Discard every change made in the open transaction.

        Raises:
            TransactionNotActive: If no transaction is open
        """
        transaction = self._require_active()
        self.design_model.restore_snapshot(transaction.snapshot)
        transaction.status = TransactionStatus.ROLLED_BACK
        self._current = None

        logger.info(
            f"Transaction {transaction.id} rolled back "
            f"({len(transaction.created)} created and {len(transaction.clones)} cloned elements discarded)"
        )

    def set_rollback_only(self) -> None:
        """
        Mark the open transaction so that commit rolls it back.

        Raises:
            TransactionNotActive: If no transaction is open
        """
        transaction = self._require_active()
        transaction.rollback_only = True
        logger.warning(f"Transaction {transaction.id} marked rollback-only")

    @property
    def is_rollback_only(self) -> bool:
        return self.is_active and self._current.rollback_only

    @contextmanager
    def transaction(self, metadata: Optional[Dict] = None) -> Generator[str, None, None]:
        """Open a transaction, commit on success, roll back on exception.

        A transaction marked rollback-only is rolled back on exit too.
        """
        tx_id = self.begin(metadata)
        try:
            yield tx_id
        except Exception:
            self.rollback()
            raise
        else:
            self.commit()

    def get_status(self) -> Dict[str, Any]:
        """Status of the open transaction, or of none."""
        if self._current is None:
            return {"active": False}

        return {
            "active": self.is_active,
            "transaction_id": self._current.id,
            "status": self._current.status.value,
            "started_at": self._current.started_at.isoformat(),
            "created": len(self._current.created),
            "cloned": len(self._current.clones),
            "rollback_only": self._current.rollback_only,
        }

    # ========================================================================
    # Creation
    # ========================================================================

    def create(self, kind: ElementKind, name: str = "") -> Union[DesignElement, Literal]:
        """
        Create a new element of ``kind``.

        Literal kinds return a ``Literal`` value specification, which is not a
        standalone element and is not tracked.

        Raises:
            TransactionNotActive: If no transaction is open
        """
        transaction = self._require_active()

        if kind in LITERAL_KINDS:
            return Literal(kind=LITERAL_KINDS[kind])

        element = ELEMENT_FACTORIES[kind](name)
        transaction.created.append(element)

        logger.debug(f"Created {kind.value} '{name}' ({element.id})")
        return element

    def clone_element(self, element: DesignElement) -> DesignElement:
        """
        Deep copy of a live element, sharing its id.

        Cloning the same element twice in one transaction returns the same
        clone. Outside a transaction the clone is an untracked preview copy
        that commit never applies.
        """
        if not self.is_active:
            return deepcopy(element)

        transaction = self._current

        if element.id in transaction.clones:
            return transaction.clones[element.id]

        clone = deepcopy(element)
        transaction.clones[element.id] = clone
        transaction.originals[element.id] = element

        logger.debug(f"Cloned {type(element).__name__} '{element.name}' ({element.id})")
        return clone

    def add_reference_data_to_data_package(self, element: DesignElement) -> None:
        """Mark a created value type or unit for the data package on commit."""
        transaction = self._require_active()
        if element.id not in transaction.reference_data:
            transaction.reference_data.append(element.id)

    def is_clone(self, element: DesignElement) -> bool:
        return self._current is not None and self._current.clones.get(element.id) is element

    def try_get_pending_element_by(self, predicate: Callable[[DesignElement], bool]) -> LookupResult:
        """First element cloned or created in the open transaction matching ``predicate``.

        Elements nested in clones and created elements are searched too.
        Always a miss when no transaction is open.
        """
        if not self.is_active:
            return LookupResult.miss()

        for root in [*self._current.clones.values(), *self._current.created]:
            for element in walk(root):
                if predicate(element):
                    return LookupResult.hit(element)

        return LookupResult.miss()

    # ========================================================================
    # Internal Helpers
    # ========================================================================

    def _require_active(self) -> Transaction:
        if not self.is_active:
            raise TransactionNotActive("No active transaction on the design model")
        return self._current
