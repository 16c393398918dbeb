"""Study log models"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator

from study_tracker.utils.datetime_helpers import to_day_key


class StudyLogEntry(BaseModel):
    """
    Hours studied on one calendar day

    `date` is always a day key (00:00 UTC). Hours are carried as given:
    range checks happen where logs are submitted, and the engine treats
    negative hours as non-qualifying.
    """
    model_config = ConfigDict(frozen=True)

    date: datetime
    hours: float

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        """Normalize any date-like input to its UTC day key"""
        try:
            return to_day_key(v)
        except TypeError as e:
            raise ValueError(str(e))
