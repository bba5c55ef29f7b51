# User-facing messages. The public site is Arabic-first.

INVALID_DATA = "بيانات غير صالحة"
SERVER_ERROR = "حدث خطأ في الخادم"
DATABASE_ERROR = "حدث خطأ في قاعدة البيانات"
ROUTE_NOT_FOUND = "المسار غير موجود"
TOO_MANY_REQUESTS = "طلبات كثيرة، يرجى المحاولة لاحقاً"
BOOKING_LIMIT_EXCEEDED = "تم تجاوز الحد المسموح للحجوزات"
OTP_LIMIT_EXCEEDED = "طلبات رمز التحقق كثيرة، يرجى الانتظار"
LOGIN_LIMIT_EXCEEDED = "محاولات تسجيل دخول كثيرة"

# Auth
UNAUTHORIZED = "غير مصرح"
INVALID_SESSION = "جلسة غير صالحة"
SESSION_EXPIRED = "جلسة منتهية"
FORBIDDEN = "ليس لديك صلاحية لهذا الإجراء"
INVALID_CREDENTIALS = "بيانات تسجيل الدخول غير صحيحة"

# Availability, keyed by reason
AVAILABLE = "✅ متوفر — يمكنك إكمال الحجز."
UNAVAILABLE = {
    "invalid_date": "❌ تاريخ غير صالح.",
    "past_date": "❌ لا يمكن الحجز في تاريخ سابق.",
    "invalid_visit_type": "❌ نوع الزيارة غير صالح.",
    "blackout_date": "❌ عذراً، هذا التاريخ غير متاح للحجز.",
    "already_booked": "❌ عذراً، هذا التاريخ محجوز بالفعل.",
}
UNAVAILABLE_DEFAULT = "❌ عذراً، هذا التاريخ غير متوفر."
AVAILABILITY_FETCHED = "تم جلب التوفر"

# Booking
BOOKING_CREATED = "✅ تم إرسال طلب الحجز بنجاح."
DATE_NOT_AVAILABLE = "هذا التاريخ غير متوفر للحجز"
SLOT_TAKEN = "تم حجز هذا التاريخ للتو، يرجى اختيار تاريخ آخر"
INVALID_DATE = "تاريخ غير صالح"
INVALID_VISIT_TYPE = "نوع الزيارة غير صالح"
TOO_MANY_GUESTS = "عدد الضيوف يتجاوز سعة الشاليه"
BOOKING_NOT_FOUND = "الحجز غير موجود"
BOOKING_FETCHED = "تم جلب بيانات الحجز"
BOOKINGS_FETCHED = "تم جلب الحجوزات"
BOOKING_UPDATED = "تم تحديث الحجز"
BOOKING_CANCELLED = "تم إلغاء الحجز بنجاح"
PHONE_MISMATCH = "رقم الجوال غير مطابق"
ALREADY_CANCELLED = "الحجز ملغي بالفعل"
CANNOT_CANCEL_COMPLETED = "لا يمكن إلغاء حجز مكتمل"
INVALID_STATUS_TRANSITION = "لا يمكن تغيير حالة الحجز من {old} إلى {new}"
INVALID_PAYMENT_TRANSITION = "لا يمكن تغيير حالة الدفع من {old} إلى {new}"

# OTP
OTP_SENT = "تم إرسال رمز التحقق إلى رقم الجوال"
OTP_REQUIRED = "يرجى إدخال رمز التحقق"
OTP_NOT_REQUESTED = "يرجى طلب رمز التحقق أولاً"
OTP_EXPIRED = "رمز التحقق منتهي الصلاحية"
OTP_INCORRECT = "رمز التحقق غير صحيح"
PHONE_VERIFIED = "تم التحقق من رقم الجوال"
PHONE_NOT_VERIFIED = "يرجى التحقق من رقم الجوال أولاً"

# Admin
BLACKOUT_NOT_FOUND = "التاريخ المحجوب غير موجود"
BLACKOUT_EXISTS = "هذا التاريخ محجوب بالفعل"
CHALET_NOT_FOUND = "الشاليه غير موجود"
CHALET_SLUG_EXISTS = "الرابط المختصر مستخدم بالفعل"
PRICING_NOT_FOUND = "السعر غير موجود"
SETTING_NOT_FOUND = "الإعداد غير موجود"
USER_NOT_FOUND = "المستخدم غير موجود"
EMAIL_EXISTS = "البريد الإلكتروني مستخدم بالفعل"
CANNOT_DELETE_SELF = "لا يمكنك حذف حسابك"
INVALID_RANGE = "نطاق التاريخ غير صالح"
BLACKOUT_CREATED = "تم حجب التاريخ بنجاح"
BLACKOUT_DELETED = "تم إلغاء حجب التاريخ"
BLACKOUTS_FETCHED = "تم جلب التواريخ المحجوبة"
DATES_BLOCKED = "تم حجب التواريخ بنجاح"
DATE_UNBLOCKED = "تم إلغاء حجب التاريخ بنجاح"
CALENDAR_FETCHED = "تم جلب بيانات التقويم"
STATS_FETCHED = "تم جلب إحصائيات لوحة التحكم"
CHALETS_FETCHED = "تم جلب الشاليهات"
CHALET_FETCHED = "تم جلب الشاليه"
CHALET_CREATED = "تم إنشاء الشاليه بنجاح"
CHALET_UPDATED = "تم تحديث الشاليه"
CHALET_DELETED = "تم حذف الشاليه"
CHALET_DEACTIVATED = "الشاليه مرتبط بحجوزات، تم إيقافه بدلاً من حذفه"
PRICING_FETCHED = "تم جلب الأسعار"
PRICING_UPDATED = "تم تحديث الأسعار"
SETTINGS_FETCHED = "تم جلب الإعدادات"
SETTINGS_UPDATED = "تم تحديث الإعدادات"
USERS_FETCHED = "تم جلب المستخدمين"
USER_FETCHED = "تم جلب المستخدم"
USER_CREATED = "تم إنشاء المستخدم بنجاح"
USER_UPDATED = "تم تحديث المستخدم"
USER_DELETED = "تم حذف المستخدم"
PASSWORD_CHANGED = "تم تغيير كلمة المرور"
CURRENT_PASSWORD_INCORRECT = "كلمة المرور الحالية غير صحيحة"
LOGIN_SUCCESS = "تم تسجيل الدخول بنجاح"
PROFILE_FETCHED = "تم جلب بيانات المستخدم"
AUDIT_LOGS_FETCHED = "تم جلب سجل التدقيق"
BOOKINGS_REPORT_FETCHED = "تم جلب تقرير الحجوزات"
REVENUE_REPORT_FETCHED = "تم جلب تقرير الإيرادات"
OCCUPANCY_REPORT_FETCHED = "تم جلب تقرير الإشغال"
CUSTOMERS_REPORT_FETCHED = "تم جلب تقرير العملاء"
IMAGE_ADDED = "تم إضافة الصورة بنجاح"
IMAGE_DELETED = "تم حذف الصورة بنجاح"
IMAGES_REORDERED = "تم تحديث ترتيب الصور"
IMAGE_NOT_FOUND = "الصورة غير موجودة"
