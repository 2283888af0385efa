from __future__ import annotations

from sqlalchemy.orm import Session

from leave_api.core.config import Settings, settings
from leave_api.core.errors import ValidationError
from leave_api.core.logging import configure_logging, get_logger
from leave_api.core.security import generate_salt, hash_password
from leave_api.db.session import Base, engine, session_scope
from leave_api.domains.roles.validation import validate_role_name
from leave_api.models import Role, RoleName, User

logger = get_logger(__name__)


def seed_roles(session: Session) -> dict[str, Role]:
    roles: dict[str, Role] = {}
    for role_name in RoleName:
        violations = validate_role_name(role_name.value)
        if violations:
            raise ValidationError.from_violations(violations)
        role = session.query(Role).filter(Role.name == role_name.value).one_or_none()
        if role is None:
            role = Role(name=role_name.value)
            session.add(role)
            session.flush()
            logger.info("role_created", role=role_name.value)
        roles[role_name.value] = role
    return roles


def seed_database(session: Session, config: Settings = settings) -> User | None:
    """Create the known roles and the default admin user. Safe to run repeatedly."""
    roles = seed_roles(session)

    if not config.admin_default_email or not config.admin_default_password:
        logger.warning("admin_credentials_missing")
        session.commit()
        return None

    admin = session.query(User).filter(User.email == config.admin_default_email).one_or_none()
    if admin is not None:
        logger.info("admin_exists", email=admin.email)
        session.commit()
        return admin

    salt = generate_salt()
    admin = User(
        email=config.admin_default_email,
        firstname="Admin",
        surname="User",
        hashed_password=hash_password(config.admin_default_password, salt),
        salt=salt,
        role_id=roles[RoleName.ADMIN.value].id,
        annual_leave_balance=config.default_leave_balance,
    )
    session.add(admin)
    session.commit()
    logger.info("admin_created", email=admin.email)
    return admin


def main() -> None:
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        seed_database(session)


if __name__ == "__main__":
    main()
