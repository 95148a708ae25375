from .claims import ClaimController
from .cpops import CpopController

CPOP_CONTROLLERS = [CpopController, ClaimController]

__all__ = ["CPOP_CONTROLLERS", "ClaimController", "CpopController"]
