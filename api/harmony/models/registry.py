"""
Every mapped table, in dependency order (households first).

Importing this module registers all models on ``Base.metadata``.
"""
from harmony.models.bill import Bill
from harmony.models.chat import ChatMessage
from harmony.models.chore import Chore, ChoreCompletion
from harmony.models.conflict import ConflictAnalysis, ConflictCoachSession
from harmony.models.household import Household
from harmony.models.notification import Notification
from harmony.models.nudge import Nudge
from harmony.models.rent import RentPayment, RentSchedule
from harmony.models.sensor import Sensor, SensorEvent

MODELS_IN_DEPENDENCY_ORDER = [
    Household,
    RentSchedule,
    RentPayment,
    Bill,
    Chore,
    ChoreCompletion,
    Sensor,
    SensorEvent,
    Nudge,
    ChatMessage,
    ConflictCoachSession,
    ConflictAnalysis,
    Notification,
]

# Household-scoped models, i.e. everything a household delete must cascade to
SCOPED_MODELS = [m for m in MODELS_IN_DEPENDENCY_ORDER if m is not Household]
