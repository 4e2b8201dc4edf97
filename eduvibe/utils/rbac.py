# eduvibe/utils/rbac.py
"""
Role-based access control.

Roles map to fixed permission sets; (action, resource) pairs map to access
rules. Every decision here is a pure function of its inputs, and anything
without a table entry is denied.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple, Union


class Role(str, Enum):
    STUDENT = "student"
    MENTOR = "mentor"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class Permission(str, Enum):
    # User management
    VIEW_PROFILE = "view_profile"
    EDIT_PROFILE = "edit_profile"
    DELETE_PROFILE = "delete_profile"
    VIEW_ALL_USERS = "view_all_users"
    MANAGE_USERS = "manage_users"

    # Session management
    BOOK_SESSION = "book_session"
    VIEW_OWN_SESSIONS = "view_own_sessions"
    MANAGE_OWN_SESSIONS = "manage_own_sessions"
    VIEW_ALL_SESSIONS = "view_all_sessions"
    MANAGE_SESSIONS = "manage_sessions"
    CANCEL_SESSION = "cancel_session"
    RESCHEDULE_SESSION = "reschedule_session"

    # Mentor-specific
    SET_AVAILABILITY = "set_availability"
    VIEW_MENTOR_ANALYTICS = "view_mentor_analytics"
    RESPOND_TO_REVIEWS = "respond_to_reviews"
    MANAGE_STUDENT_SESSIONS = "manage_student_sessions"

    # Student-specific
    WRITE_REVIEWS = "write_reviews"
    EDIT_OWN_REVIEWS = "edit_own_reviews"
    DELETE_OWN_REVIEWS = "delete_own_reviews"
    VIEW_MENTOR_PROFILES = "view_mentor_profiles"
    GET_RECOMMENDATIONS = "get_recommendations"

    # Payments
    MAKE_PAYMENTS = "make_payments"
    VIEW_OWN_PAYMENTS = "view_own_payments"
    VIEW_ALL_PAYMENTS = "view_all_payments"
    MANAGE_PAYMENTS = "manage_payments"

    # Reviews
    VIEW_REVIEWS = "view_reviews"
    MODERATE_REVIEWS = "moderate_reviews"
    DELETE_ANY_REVIEW = "delete_any_review"

    # Files
    UPLOAD_FILES = "upload_files"
    VIEW_OWN_FILES = "view_own_files"
    MANAGE_FILES = "manage_files"

    # Notifications
    VIEW_OWN_NOTIFICATIONS = "view_own_notifications"
    SEND_NOTIFICATIONS = "send_notifications"

    # Admin
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_PLATFORM = "manage_platform"
    MODERATE_CONTENT = "moderate_content"
    MANAGE_DISPUTES = "manage_disputes"

    # Super admin
    MANAGE_ADMINS = "manage_admins"
    SYSTEM_SETTINGS = "system_settings"
    DATABASE_ACCESS = "database_access"


class Resource(str, Enum):
    USER = "user"
    SESSION = "session"
    REVIEW = "review"
    PAYMENT = "payment"
    FILE = "file"
    NOTIFICATION = "notification"
    ANALYTICS = "analytics"
    PLATFORM = "platform"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    UPDATE_OWN = "update_own"
    DELETE_OWN = "delete_own"


# ======================
# ROLE -> PERMISSION TABLE
# ======================

_MEMBER_PERMISSIONS = frozenset({
    Permission.VIEW_PROFILE,
    Permission.EDIT_PROFILE,
    Permission.VIEW_OWN_SESSIONS,
    Permission.MANAGE_OWN_SESSIONS,
    Permission.CANCEL_SESSION,
    Permission.RESCHEDULE_SESSION,
    Permission.VIEW_REVIEWS,
    Permission.VIEW_MENTOR_PROFILES,
    Permission.VIEW_OWN_PAYMENTS,
    Permission.UPLOAD_FILES,
    Permission.VIEW_OWN_FILES,
    Permission.VIEW_OWN_NOTIFICATIONS,
})

_STUDENT_PERMISSIONS = _MEMBER_PERMISSIONS | {
    Permission.BOOK_SESSION,
    Permission.WRITE_REVIEWS,
    Permission.EDIT_OWN_REVIEWS,
    Permission.DELETE_OWN_REVIEWS,
    Permission.GET_RECOMMENDATIONS,
    Permission.MAKE_PAYMENTS,
}

_MENTOR_PERMISSIONS = _MEMBER_PERMISSIONS | {
    Permission.SET_AVAILABILITY,
    Permission.VIEW_MENTOR_ANALYTICS,
    Permission.RESPOND_TO_REVIEWS,
    Permission.MANAGE_STUDENT_SESSIONS,
}

_ADMIN_PERMISSIONS = _STUDENT_PERMISSIONS | _MENTOR_PERMISSIONS | {
    Permission.VIEW_ALL_USERS,
    Permission.MANAGE_USERS,
    Permission.VIEW_ALL_SESSIONS,
    Permission.MANAGE_SESSIONS,
    Permission.MODERATE_REVIEWS,
    Permission.DELETE_ANY_REVIEW,
    Permission.VIEW_ALL_PAYMENTS,
    Permission.MANAGE_PAYMENTS,
    Permission.MANAGE_FILES,
    Permission.SEND_NOTIFICATIONS,
    Permission.VIEW_ANALYTICS,
    Permission.MANAGE_PLATFORM,
    Permission.MODERATE_CONTENT,
    Permission.MANAGE_DISPUTES,
}

_SUPER_ADMIN_PERMISSIONS = _ADMIN_PERMISSIONS | {
    Permission.MANAGE_ADMINS,
    Permission.SYSTEM_SETTINGS,
    Permission.DATABASE_ACCESS,
    Permission.DELETE_PROFILE,
}

ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.STUDENT: frozenset(_STUDENT_PERMISSIONS),
    Role.MENTOR: frozenset(_MENTOR_PERMISSIONS),
    Role.ADMIN: frozenset(_ADMIN_PERMISSIONS),
    Role.SUPER_ADMIN: frozenset(_SUPER_ADMIN_PERMISSIONS),
}

ROLE_HIERARCHY: Dict[Role, FrozenSet[Role]] = {
    Role.STUDENT: frozenset({Role.STUDENT}),
    Role.MENTOR: frozenset({Role.MENTOR}),
    Role.ADMIN: frozenset({Role.ADMIN, Role.MENTOR, Role.STUDENT}),
    Role.SUPER_ADMIN: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.MENTOR, Role.STUDENT}),
}

ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


# ======================
# (ACTION, RESOURCE) -> RULE TABLE
# ======================

@dataclass(frozen=True)
class AccessRule:
    """Either an ownership rule or a set of permissions, any one of which grants access."""
    any_of: FrozenSet[Permission] = frozenset()
    owner_only: bool = False


def _perms(*permissions: Permission) -> AccessRule:
    return AccessRule(any_of=frozenset(permissions))


_OWNER = AccessRule(owner_only=True)

ACCESS_RULES: Dict[Tuple[Action, Resource], AccessRule] = {
    # Users
    (Action.READ, Resource.USER): _perms(Permission.VIEW_PROFILE, Permission.VIEW_ALL_USERS),
    (Action.UPDATE, Resource.USER): _perms(Permission.MANAGE_USERS),
    (Action.UPDATE_OWN, Resource.USER): _OWNER,
    (Action.DELETE, Resource.USER): _perms(Permission.DELETE_PROFILE, Permission.MANAGE_USERS),
    (Action.MANAGE, Resource.USER): _perms(Permission.MANAGE_USERS),

    # Sessions
    (Action.CREATE, Resource.SESSION): _perms(Permission.BOOK_SESSION),
    (Action.READ, Resource.SESSION): _perms(Permission.VIEW_OWN_SESSIONS, Permission.VIEW_ALL_SESSIONS),
    (Action.UPDATE, Resource.SESSION): _perms(
        Permission.MANAGE_SESSIONS,
        Permission.MANAGE_STUDENT_SESSIONS,
        Permission.RESCHEDULE_SESSION,
    ),
    (Action.UPDATE_OWN, Resource.SESSION): _OWNER,
    (Action.DELETE, Resource.SESSION): _perms(Permission.CANCEL_SESSION, Permission.MANAGE_SESSIONS),
    (Action.DELETE_OWN, Resource.SESSION): _OWNER,
    (Action.MANAGE, Resource.SESSION): _perms(Permission.MANAGE_SESSIONS),

    # Reviews
    (Action.CREATE, Resource.REVIEW): _perms(Permission.WRITE_REVIEWS),
    (Action.READ, Resource.REVIEW): _perms(Permission.VIEW_REVIEWS),
    (Action.UPDATE, Resource.REVIEW): _perms(
        Permission.EDIT_OWN_REVIEWS,
        Permission.RESPOND_TO_REVIEWS,
        Permission.MODERATE_REVIEWS,
    ),
    (Action.UPDATE_OWN, Resource.REVIEW): _OWNER,
    (Action.DELETE, Resource.REVIEW): _perms(Permission.DELETE_OWN_REVIEWS, Permission.DELETE_ANY_REVIEW),
    (Action.DELETE_OWN, Resource.REVIEW): _OWNER,
    (Action.MANAGE, Resource.REVIEW): _perms(Permission.MODERATE_REVIEWS),

    # Payments
    (Action.CREATE, Resource.PAYMENT): _perms(Permission.MAKE_PAYMENTS),
    (Action.READ, Resource.PAYMENT): _perms(Permission.VIEW_OWN_PAYMENTS, Permission.VIEW_ALL_PAYMENTS),
    (Action.UPDATE, Resource.PAYMENT): _perms(Permission.MANAGE_PAYMENTS),
    (Action.MANAGE, Resource.PAYMENT): _perms(Permission.MANAGE_PAYMENTS),

    # Files
    (Action.CREATE, Resource.FILE): _perms(Permission.UPLOAD_FILES),
    (Action.READ, Resource.FILE): _OWNER,
    (Action.UPDATE_OWN, Resource.FILE): _OWNER,
    (Action.DELETE, Resource.FILE): _perms(Permission.MANAGE_FILES),
    (Action.DELETE_OWN, Resource.FILE): _OWNER,
    (Action.MANAGE, Resource.FILE): _perms(Permission.MANAGE_FILES),

    # Notifications
    (Action.CREATE, Resource.NOTIFICATION): _perms(Permission.SEND_NOTIFICATIONS),
    (Action.READ, Resource.NOTIFICATION): _perms(Permission.VIEW_OWN_NOTIFICATIONS),
    (Action.UPDATE_OWN, Resource.NOTIFICATION): _OWNER,
    (Action.DELETE_OWN, Resource.NOTIFICATION): _OWNER,
    (Action.MANAGE, Resource.NOTIFICATION): _perms(Permission.SEND_NOTIFICATIONS),

    # Analytics
    (Action.READ, Resource.ANALYTICS): _perms(Permission.VIEW_ANALYTICS, Permission.VIEW_MENTOR_ANALYTICS),

    # Platform
    (Action.READ, Resource.PLATFORM): _perms(Permission.MANAGE_PLATFORM),
    (Action.UPDATE, Resource.PLATFORM): _perms(Permission.MANAGE_PLATFORM),
    (Action.MANAGE, Resource.PLATFORM): _perms(Permission.MANAGE_PLATFORM),
}


# ======================
# ACCESS CONTEXT
# ======================

Identifier = Union[int, str]


@dataclass(frozen=True)
class AccessContext:
    user_id: Identifier
    role: Union[Role, str]
    resource_id: Optional[Identifier] = None
    resource_owner_id: Optional[Identifier] = None


# ======================
# ROLE HELPERS
# ======================

def coerce_role(role: Union[Role, str, None]) -> Optional[Role]:
    """Return the Role for ``role`` or None when it is not a known role."""
    if isinstance(role, Role):
        return role
    if role is None:
        return None
    try:
        return Role(str(role).strip().lower())
    except ValueError:
        return None


def has_role(role: Union[Role, str, None], allowed_roles: Iterable[Union[Role, str]]) -> bool:
    resolved = coerce_role(role)
    if resolved is None:
        return False
    return resolved in {coerce_role(r) for r in allowed_roles}


def is_admin(role: Union[Role, str, None]) -> bool:
    return coerce_role(role) in ADMIN_ROLES


def is_mentor(role: Union[Role, str, None]) -> bool:
    return coerce_role(role) == Role.MENTOR


def is_student(role: Union[Role, str, None]) -> bool:
    return coerce_role(role) == Role.STUDENT


def role_inherits_from(role: Union[Role, str, None], required_role: Union[Role, str]) -> bool:
    resolved = coerce_role(role)
    if resolved is None:
        return False
    return coerce_role(required_role) in ROLE_HIERARCHY[resolved]


# ======================
# PERMISSION CHECKS
# ======================

def permissions_for(role: Union[Role, str, None]) -> FrozenSet[Permission]:
    resolved = coerce_role(role)
    if resolved is None:
        return frozenset()
    return ROLE_PERMISSIONS[resolved]


def has_permission(context: AccessContext, permission: Permission) -> bool:
    return permission in permissions_for(context.role)


def can_access_own_resource(context: AccessContext, resource_owner_id: Optional[Identifier]) -> bool:
    if resource_owner_id is None:
        return False
    return context.user_id == resource_owner_id


def can_perform(
    context: AccessContext,
    action: Union[Action, str],
    resource: Union[Resource, str],
    resource_id: Optional[Identifier] = None,
) -> bool:
    """
    Decide whether the caller in ``context`` may perform ``action`` on ``resource``.

    Administrators always pass. Ownership rules compare
    ``context.resource_owner_id`` with ``context.user_id``. Everything else
    needs one of the permissions the rule lists.

    Raises:
        ValueError: if ``action`` or ``resource`` is not a known tag.
    """
    action = Action(action)
    resource = Resource(resource)

    if is_admin(context.role):
        return True

    if coerce_role(context.role) is None:
        return False

    rule = ACCESS_RULES.get((action, resource))
    if rule is None:
        return False

    if rule.owner_only:
        return can_access_own_resource(context, context.resource_owner_id)

    granted = permissions_for(context.role)
    return any(permission in granted for permission in rule.any_of)


class PermissionChecker:
    """Binds an AccessContext so route code can ask several questions about one caller."""

    def __init__(self, context: AccessContext):
        self.context = context

    def has_permission(self, permission: Permission) -> bool:
        return has_permission(self.context, permission)

    def can_perform(
        self,
        action: Union[Action, str],
        resource: Union[Resource, str],
        resource_id: Optional[Identifier] = None,
    ) -> bool:
        return can_perform(self.context, action, resource, resource_id)

    def can_access_own_resource(self, resource_owner_id: Optional[Identifier]) -> bool:
        return can_access_own_resource(self.context, resource_owner_id)


def create_permission_checker(context: AccessContext) -> PermissionChecker:
    return PermissionChecker(context)
