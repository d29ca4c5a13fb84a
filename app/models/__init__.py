# Study Spots: Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User              # noqa
from app.models.location import Location      # noqa
from app.models.sensor import Sensor          # noqa
from app.models.favorite import Favorite      # noqa
from app.models.study_plan import StudyPlan   # noqa
from app.models.sync_log import SyncLog       # noqa
