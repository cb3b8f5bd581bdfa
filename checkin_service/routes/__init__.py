from checkin_service.routes.checkin import checkin_bp
from checkin_service.routes.distribution import distribution_bp
from checkin_service.routes.students import students_bp
