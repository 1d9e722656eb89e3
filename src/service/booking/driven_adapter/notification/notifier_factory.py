from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_notifier import INotifier
from src.service.booking.driven_adapter.notification.mock_email_notifier import MockEmailNotifier
from src.service.booking.driven_adapter.notification.smtp_email_notifier import SmtpEmailNotifier


def build_notifier(settings: Settings) -> INotifier:
    if settings.is_mock_email:
        Logger.base.warning('📧 [NOTIFY] SMTP_USER/SMTP_PASSWORD not set, emails are only logged')
        return MockEmailNotifier()
    return SmtpEmailNotifier(settings)
