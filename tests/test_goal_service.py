import pytest
from datetime import date, timedelta
from skillwise.core.errors import NotFound, ValidationError
from skillwise.schemas.challenge import ChallengeCreate, ChallengePatch
from skillwise.schemas.goal import GoalCreate, GoalPatch, GoalFilter
from skillwise.services.challenge import ChallengeService
from skillwise.services.goal import GoalService


@pytest.fixture
async def owner(make_user):
    return await make_user()


async def test_create_goal_defaults(db, owner):
    goal = await GoalService(db).create(owner.id, GoalCreate(title="  Learn SQL "))
    assert goal.id is not None
    assert goal.title == "Learn SQL"
    assert goal.difficulty_level == "medium"
    assert goal.progress_percentage == 0
    assert goal.is_completed is False
    assert goal.created_at is not None


async def test_create_goal_normalizes_difficulty(db, owner):
    goal = await GoalService(db).create(owner.id, GoalCreate(title="Algorithms", difficulty_level="HARD"))
    assert goal.difficulty_level == "hard"


async def test_create_goal_rejects_bad_title(db, owner):
    service = GoalService(db)
    with pytest.raises(ValidationError):
        await service.create(owner.id, GoalCreate(title=""))
    with pytest.raises(ValidationError):
        await service.create(owner.id, GoalCreate(title="x" * 256))
    goal = await service.create(owner.id, GoalCreate(title="x" * 255))
    assert len(goal.title) == 255


async def test_other_users_goal_is_not_found(db, make_user):
    alice, bob = await make_user(), await make_user()
    goal = await GoalService(db).create(alice.id, GoalCreate(title="Private"))
    with pytest.raises(NotFound):
        await GoalService(db).get(bob.id, goal.id)
    with pytest.raises(NotFound):
        await GoalService(db).delete(bob.id, goal.id)


async def test_list_goals_only_returns_own_and_filters(db, make_user):
    alice, bob = await make_user(), await make_user()
    service = GoalService(db)
    await service.create(alice.id, GoalCreate(title="A1", category="Web", difficulty_level="easy"))
    await service.create(alice.id, GoalCreate(title="A2", category="Data"))
    await service.create(bob.id, GoalCreate(title="B1", category="Web"))

    goals = await service.list(alice.id)
    assert [g.title for g in goals] == ["A2", "A1"]

    web = await service.list(alice.id, GoalFilter(category="web"))
    assert [g.title for g in web] == ["A1"]

    easy = await service.list(alice.id, GoalFilter(difficulty="EASY"))
    assert [g.title for g in easy] == ["A1"]


async def test_mark_complete_forces_full_progress(db, owner):
    service = GoalService(db)
    goal = await service.create(owner.id, GoalCreate(title="Ship it"))
    goal = await service.update(owner.id, goal.id, GoalPatch(is_completed=True))
    assert goal.progress_percentage == 100
    assert goal.is_completed is True
    assert goal.completed_at is not None


async def test_progress_update_sets_completion(db, owner):
    service = GoalService(db)
    goal = await service.create(owner.id, GoalCreate(title="Halfway"))

    goal = await service.update_progress(owner.id, goal.id, 100)
    assert goal.is_completed is True
    assert goal.completed_at is not None

    goal = await service.update_progress(owner.id, goal.id, 40)
    assert goal.progress_percentage == 40
    assert goal.is_completed is False
    assert goal.completed_at is None


async def test_progress_out_of_range_is_rejected(db, owner):
    service = GoalService(db)
    goal = await service.create(owner.id, GoalCreate(title="Bounds"))
    with pytest.raises(ValidationError):
        await service.update_progress(owner.id, goal.id, 101)
    with pytest.raises(ValidationError):
        await service.update(owner.id, goal.id, GoalPatch(progress_percentage=-5))


async def test_incomplete_at_full_progress_is_rejected(db, owner):
    service = GoalService(db)
    goal = await service.create(owner.id, GoalCreate(title="Done already"))
    await service.update(owner.id, goal.id, GoalPatch(is_completed=True))
    with pytest.raises(ValidationError):
        await service.update(owner.id, goal.id, GoalPatch(is_completed=False))

    goal = await service.update(owner.id, goal.id, GoalPatch(is_completed=False, progress_percentage=80))
    assert goal.is_completed is False
    assert goal.progress_percentage == 80


async def test_partial_update_keeps_other_fields(db, owner):
    service = GoalService(db)
    goal = await service.create(owner.id, GoalCreate(title="Keep", description="desc", category="Web"))
    goal = await service.update(owner.id, goal.id, GoalPatch(title="Renamed"))
    assert goal.title == "Renamed"
    assert goal.description == "desc"
    assert goal.category == "Web"


async def test_recalculate_progress_from_challenges(db, owner):
    goals = GoalService(db)
    challenges = ChallengeService(db)
    goal = await goals.create(owner.id, GoalCreate(title="Three steps"))
    created = [
        await challenges.create(ChallengeCreate(title=f"Step {i}", goal_id=goal.id), owner.id)
        for i in range(3)
    ]

    await challenges.update(created[0].id, ChallengePatch(status="completed"), owner.id)
    goal = await goals.get(owner.id, goal.id)
    assert goal.progress_percentage == 33

    await challenges.update(created[1].id, ChallengePatch(status="done"), owner.id)
    goal = await goals.get(owner.id, goal.id)
    assert goal.progress_percentage == 67
    assert goal.is_completed is False

    await challenges.update(created[2].id, ChallengePatch(status="completed"), owner.id)
    goal = await goals.get(owner.id, goal.id)
    assert goal.progress_percentage == 100
    assert goal.is_completed is True
    assert goal.completed_at is not None


async def test_recalculate_is_idempotent(db, owner):
    goals = GoalService(db)
    goal = await goals.create(owner.id, GoalCreate(title="Stable"))
    await ChallengeService(db).create(ChallengeCreate(title="One", goal_id=goal.id, status="completed"), owner.id)

    first = await goals.recalculate_progress(goal.id)
    second = await goals.recalculate_progress(goal.id)
    assert first.progress_percentage == second.progress_percentage == 100


async def test_recalculate_missing_goal_returns_none(db):
    assert await GoalService(db).recalculate_progress(9999) is None


async def test_progress_details(db, owner):
    goals = GoalService(db)
    goal = await goals.create(
        owner.id, GoalCreate(title="Late", target_date=date.today() - timedelta(days=1))
    )
    await ChallengeService(db).create(ChallengeCreate(title="One", goal_id=goal.id, status="completed"), owner.id)
    await ChallengeService(db).create(ChallengeCreate(title="Two", goal_id=goal.id), owner.id)

    details = await goals.progress_details(owner.id, goal.id)
    assert details.total_challenges == 2
    assert details.completed_challenges == 1
    assert details.progress_percentage == 50
    assert details.is_overdue is True


async def test_delete_goal_cascades_to_challenges(db, owner):
    goals = GoalService(db)
    challenges = ChallengeService(db)
    goal = await goals.create(owner.id, GoalCreate(title="Temporary"))
    challenge = await challenges.create(ChallengeCreate(title="Linked", goal_id=goal.id), owner.id)

    await goals.delete(owner.id, goal.id)

    with pytest.raises(NotFound):
        await goals.get(owner.id, goal.id)
    with pytest.raises(NotFound):
        await challenges.get(challenge.id)
