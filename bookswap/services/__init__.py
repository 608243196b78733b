# bookswap/services/__init__.py
from .listing_store import ListingStore
from .conversation_store import ConversationStore
from .exchange_coordinator import ExchangeCoordinator
from .orchestration import OrchestrationFacade

__all__ = ['ListingStore', 'ConversationStore', 'ExchangeCoordinator', 'OrchestrationFacade']
