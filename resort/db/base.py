# Import every model so Base.metadata is complete (Alembic, create_all in tests)
from resort.db.session import Base  # noqa: F401
from resort.models.admin_user import AdminUser  # noqa: F401
from resort.models.audit_log import AuditLog  # noqa: F401
from resort.models.chalet import Chalet, ChaletImage  # noqa: F401
from resort.models.booking import Booking  # noqa: F401
from resort.models.blackout_date import BlackoutDate  # noqa: F401
from resort.models.booking_counter import BookingCounter  # noqa: F401
from resort.models.pricing import Pricing, ChaletPricing  # noqa: F401
from resort.models.setting import Setting  # noqa: F401
from resort.models.otp_code import OtpCode  # noqa: F401
