"""
Access-control roles and which contract knows which role.

The contracts expose each role hash as a public constant (``MINTER_ROLE()``
etc.); the table maps a role to that getter per contract.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .errors import UnknownRoleError


class Role(Enum):
    MINTER = "MINTER_ROLE"
    BURNER = "BURNER_ROLE"
    TRANSFER = "TRANSFER_ROLE"


class ContractKind(Enum):
    MEMBERSHIP = "membership"
    FOB = "fob"


# Role-grant menu numbering per contract (0 is "go back").
ROLE_TABLE: dict[ContractKind, dict[int, Role]] = {
    ContractKind.MEMBERSHIP: {1: Role.MINTER, 2: Role.TRANSFER},
    ContractKind.FOB: {1: Role.MINTER, 2: Role.BURNER},
}


def role_getter(contract: ContractKind, role: Role) -> str:
    """Name of the contract's constant getter for ``role``."""
    if role not in ROLE_TABLE[contract].values():
        raise UnknownRoleError(f"{role.name} is not a role of the {contract.value} contract")
    return role.value


def role_from_choice(contract: ContractKind, choice: int) -> Optional[Role]:
    """Map a menu number to a role; ``None`` when the number means nothing."""
    return ROLE_TABLE[contract].get(choice)
