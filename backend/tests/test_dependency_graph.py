"""
Tests for the dependency graph store.

Covers:
- dependencies/dependents lookups in both directions
- exact-edge existence checks
- has_path reachability, including empty graphs, disconnected tasks,
  zero-length paths and diamond-shaped graphs
"""

import logging

import pytest
from sqlalchemy.orm import Session

import models
from dependency_graph import (
    create_edge,
    delete_edge,
    dependency_exists,
    get_dependencies_for,
    get_dependents_for,
    get_edge,
    has_path,
    list_edges_for_task,
)
from tests.conftest import make_task, make_dependency

logger = logging.getLogger(__name__)


@pytest.fixture
def tasks(test_db: Session, admin_user: models.User):
    """Five pending tasks, no edges."""
    return [make_task(test_db, admin_user, f"Task {i}") for i in range(1, 6)]


# ============== Lookups ==============


def test_lookups_on_empty_graph(test_db: Session, tasks):
    t1 = tasks[0]
    assert get_dependencies_for(test_db, t1.id) == []
    assert get_dependents_for(test_db, t1.id) == []
    assert list_edges_for_task(test_db, t1.id) == []


def test_dependencies_and_dependents_are_directional(test_db: Session, tasks):
    t1, t2, t3 = tasks[:3]
    # t1 is blocked by t2 and t3
    make_dependency(test_db, blocked=t1, blocking=t2)
    make_dependency(test_db, blocked=t1, blocking=t3)

    blockers = get_dependencies_for(test_db, t1.id)
    assert [e.blocking_task_id for e in blockers] == [t2.id, t3.id]
    assert get_dependents_for(test_db, t1.id) == []

    dependents = get_dependents_for(test_db, t2.id)
    assert [e.blocked_task_id for e in dependents] == [t1.id]
    assert get_dependencies_for(test_db, t2.id) == []
    logger.info("✓ Dependency lookups respect edge direction")


def test_list_edges_for_task_includes_both_directions(test_db: Session, tasks):
    t1, t2, t3 = tasks[:3]
    e1 = make_dependency(test_db, blocked=t2, blocking=t1)
    e2 = make_dependency(test_db, blocked=t3, blocking=t2)

    assert [e.id for e in list_edges_for_task(test_db, t2.id)] == [e1.id, e2.id]


def test_dependency_exists_matches_exact_direction(test_db: Session, tasks):
    t1, t2 = tasks[:2]
    make_dependency(test_db, blocked=t1, blocking=t2)

    assert dependency_exists(test_db, blocking_task_id=t2.id, blocked_task_id=t1.id) is True
    assert dependency_exists(test_db, blocking_task_id=t1.id, blocked_task_id=t2.id) is False


def test_create_and_delete_edge(test_db: Session, tasks, admin_user: models.User):
    t1, t2 = tasks[:2]
    edge = create_edge(test_db, blocking_task_id=t2.id, blocked_task_id=t1.id, created_by_user_id=admin_user.id)
    test_db.commit()

    stored = get_edge(test_db, edge.id)
    assert stored is not None
    assert stored.created_by_user_id == admin_user.id

    delete_edge(test_db, stored)
    test_db.commit()
    assert get_edge(test_db, edge.id) is None
    assert get_dependencies_for(test_db, t1.id) == []


# ============== has_path ==============


def test_has_path_zero_length(test_db: Session, tasks):
    assert has_path(test_db, tasks[0].id, tasks[0].id) is True


def test_has_path_on_empty_graph(test_db: Session, tasks):
    assert has_path(test_db, tasks[0].id, tasks[1].id) is False


def test_has_path_follows_depends_on_direction(test_db: Session, tasks):
    t1, t2, t3 = tasks[:3]
    # t1 depends on t2, t2 depends on t3
    make_dependency(test_db, blocked=t1, blocking=t2)
    make_dependency(test_db, blocked=t2, blocking=t3)

    assert has_path(test_db, t1.id, t2.id) is True
    assert has_path(test_db, t1.id, t3.id) is True
    assert has_path(test_db, t3.id, t1.id) is False
    assert has_path(test_db, t2.id, t1.id) is False
    logger.info("✓ has_path walks blocked -> blocking only")


def test_has_path_disconnected_components(test_db: Session, tasks):
    t1, t2, t3, t4 = tasks[:4]
    make_dependency(test_db, blocked=t1, blocking=t2)
    make_dependency(test_db, blocked=t3, blocking=t4)

    assert has_path(test_db, t1.id, t4.id) is False
    assert has_path(test_db, t3.id, t2.id) is False


def test_has_path_through_diamond(test_db: Session, tasks):
    t1, t2, t3, t4, t5 = tasks
    # t1 -> {t2, t3} -> t4, and t5 is unrelated
    make_dependency(test_db, blocked=t1, blocking=t2)
    make_dependency(test_db, blocked=t1, blocking=t3)
    make_dependency(test_db, blocked=t2, blocking=t4)
    make_dependency(test_db, blocked=t3, blocking=t4)

    assert has_path(test_db, t1.id, t4.id) is True
    assert has_path(test_db, t1.id, t5.id) is False
    assert has_path(test_db, t4.id, t1.id) is False
