import sentry_sdk

from leave_api.core.config import settings


def configure_error_monitoring() -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.env,
            traces_sample_rate=0.2,
            send_default_pii=False,
        )
