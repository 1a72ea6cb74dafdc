"""
Shell - Interactive menus over the lifecycle client.

Menus:
- Membership:         issue, transfer, query, grant roles
- Fob:                issue, reissue, extend, burn, query, grant roles
- TokenBound Account: act through a membership's ERC-6551 account
- Send Ether:         plain value transfer between users
"""

from .main import MAIN_MENU, print_deployments, run_shell
from .session import Session

__all__ = ["MAIN_MENU", "Session", "print_deployments", "run_shell"]
