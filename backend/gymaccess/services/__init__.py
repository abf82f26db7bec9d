# Services module

from gymaccess.services.access_service import AccessValidationService
from gymaccess.services.gamification_service import GamificationService

__all__ = ["AccessValidationService", "GamificationService"]
