from .user_model import User, BotRole
from .event_model import Event
from .position_model import Position
from .slot_model import Slot
from .volunteer_model import Volunteer
from .slot_volunteer_model import SlotVolunteer

__all__ = ["User", "BotRole", "Event", "Position", "Slot", "Volunteer", "SlotVolunteer"]
