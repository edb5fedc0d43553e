"""
Row-level owner policies.

Each user-data table declares which operations its owner may perform.
A session bound to a user (see :func:`bind_user`) only ever sees rows whose
``user_id`` matches. Any insert, update or delete it flushes or executes as
an ORM statement is checked against the table's policy, and forbidden bulk
statements raise before they run. Sessions with no bound user act as the
service role and are not restricted.
"""

import logging
import re
from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session, ORMExecuteState, with_loader_criteria

from .models import Profile, NetworkingMessage, MessageAnalytics

logger = logging.getLogger(__name__)

SELECT = "select"
INSERT = "insert"
UPDATE = "update"
DELETE = "delete"

OWNER_POLICIES: dict[type, frozenset[str]] = {
    Profile: frozenset({SELECT, INSERT, UPDATE}),
    NetworkingMessage: frozenset({SELECT, INSERT, UPDATE, DELETE}),
    MessageAnalytics: frozenset({SELECT, INSERT}),
}

_USER_KEY = "user_id"

# bind names SQLAlchemy gives a multi-row INSERT ... VALUES
_MULTI_VALUES_KEY = re.compile(r"user_id_m\d+")


class PolicyViolation(Exception):
    """A bound session tried to write a row its user does not own or may not change."""


def bind_user(session: Session, user_id: str) -> Session:
    """Restrict ``session`` to rows owned by ``user_id``."""
    session.info[_USER_KEY] = user_id
    return session


def current_user_id(session: Session) -> Optional[str]:
    """Return the user a session is bound to, or None for the service role."""
    return session.info.get(_USER_KEY)


def is_permitted(model: type, action: str) -> bool:
    """Check whether owners may perform ``action`` on ``model`` rows."""
    policy = OWNER_POLICIES.get(model)
    return policy is not None and action in policy


@event.listens_for(Session, "do_orm_execute")
def _filter_to_owner(execute_state: ORMExecuteState) -> None:
    user_id = current_user_id(execute_state.session)
    if user_id is None:
        return

    if execute_state.is_insert or execute_state.is_update or execute_state.is_delete:
        _check_statement(execute_state, user_id)
        if execute_state.is_insert:
            return
    elif not execute_state.is_select:
        return

    criteria = [
        with_loader_criteria(model, lambda cls: cls.user_id == user_id, include_aliases=True)
        for model in OWNER_POLICIES
    ]
    execute_state.statement = execute_state.statement.options(*criteria)


def _statement_model(execute_state: ORMExecuteState) -> Optional[type]:
    mapper = execute_state.bind_mapper
    if mapper is not None:
        return mapper.class_

    table_name = getattr(getattr(execute_state.statement, "table", None), "name", None)
    for model in OWNER_POLICIES:
        if model.__tablename__ == table_name:
            return model
    return None


def _assigned_owners(execute_state: ORMExecuteState) -> list:
    """Collect every ``user_id`` value an INSERT or UPDATE statement would write."""
    owners = [
        value for key, value in execute_state.statement.compile().params.items()
        if value is not None and (key == _USER_KEY or _MULTI_VALUES_KEY.fullmatch(key))
    ]

    parameters = execute_state.parameters
    rows = parameters if isinstance(parameters, (list, tuple)) else [parameters or {}]
    owners.extend(row[_USER_KEY] for row in rows if _USER_KEY in row)
    return owners


def _check_statement(execute_state: ORMExecuteState, user_id: str) -> None:
    if execute_state.is_insert:
        action = INSERT
    elif execute_state.is_update:
        action = UPDATE
    else:
        action = DELETE

    model = _statement_model(execute_state)
    if model is None:
        return

    table = model.__tablename__
    if not execute_state.is_orm_statement:
        logger.warning("Blocked table-level %s on %s for user %s", action, table, user_id)
        raise PolicyViolation(f"{action} on {table} must go through the mapped class")

    if not is_permitted(model, action):
        logger.warning("Blocked %s on %s for user %s", action, table, user_id)
        raise PolicyViolation(f"{action} on {table} is not permitted")

    if action == DELETE:
        return

    owners = _assigned_owners(execute_state)
    if action == INSERT and not owners:
        raise PolicyViolation(f"{action} on {table} without an owner")
    if any(owner != user_id for owner in owners):
        logger.warning("Blocked %s on %s row for another owner, user %s", action, table, user_id)
        raise PolicyViolation(f"{action} on {table} row owned by another user")


@event.listens_for(Session, "before_flush")
def _check_writes(session: Session, flush_context: Any, instances: Any) -> None:
    user_id = current_user_id(session)
    if user_id is None:
        return

    for obj in session.new:
        _check_row(obj, INSERT, user_id)
    for obj in session.dirty:
        if session.is_modified(obj):
            _check_row(obj, UPDATE, user_id)
    for obj in session.deleted:
        _check_row(obj, DELETE, user_id)


def _check_row(obj: Any, action: str, user_id: str) -> None:
    model = type(obj)
    if model not in OWNER_POLICIES:
        return

    table = model.__tablename__
    if not is_permitted(model, action):
        logger.warning("Blocked %s on %s for user %s", action, table, user_id)
        raise PolicyViolation(f"{action} on {table} is not permitted")

    if obj.user_id != user_id:
        logger.warning("Blocked %s on %s row owned by %s for user %s", action, table, obj.user_id, user_id)
        raise PolicyViolation(f"{action} on {table} row owned by another user")
