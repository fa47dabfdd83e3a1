import pytest
from games.base_game import GROUND_Y, create_actor
from games.physics import PhysicsEngine


def test_grounded_actor_stays_on_ground():
    physics = PhysicsEngine()
    actor = create_actor("p1")

    for _ in range(10):
        physics.step(actor)

    assert actor.y == GROUND_Y
    assert actor.velocity_y == 0
    assert actor.is_grounded


def test_jump_arc_returns_to_ground():
    physics = PhysicsEngine()
    actor = create_actor("p1")

    assert physics.jump(actor)
    assert actor.velocity_y == -15
    assert actor.is_jumping and not actor.is_grounded

    steps = 0
    highest = actor.y
    while True:
        physics.step(actor)
        steps += 1
        highest = min(highest, actor.y)
        assert actor.y <= GROUND_Y
        if actor.is_grounded:
            break
        assert steps < 100

    assert 36 <= steps <= 38
    assert actor.y == GROUND_Y
    assert not actor.is_jumping
    assert GROUND_Y - highest <= physics.jump_height()
    assert GROUND_Y - highest > 130


def test_jump_ignored_while_airborne():
    physics = PhysicsEngine()
    actor = create_actor("p1")

    physics.jump(actor)
    physics.step(actor)
    velocity = actor.velocity_y

    assert not physics.jump(actor)
    assert actor.velocity_y == velocity


def test_dead_actor_does_not_move():
    physics = PhysicsEngine()
    actor = create_actor("p1")
    physics.jump(actor)
    physics.step(actor)
    actor.is_alive = False
    y = actor.y

    physics.step(actor)

    assert actor.y == y
    assert not physics.jump(actor)


def test_gravity_applies_before_position():
    physics = PhysicsEngine(gravity=1, jump_force=-10)
    actor = create_actor("p1")
    physics.jump(actor)

    physics.step(actor)

    assert actor.velocity_y == -9
    assert actor.y == GROUND_Y - 9


def test_kinematic_bounds():
    physics = PhysicsEngine()

    assert physics.jump_height() == pytest.approx(140.625)
    assert physics.jump_duration_frames() == pytest.approx(37.5)
    assert physics.jump_duration_ms(1000 / 60) == pytest.approx(625)
    assert physics.jump_arc_distance(12) == pytest.approx(450)


@pytest.mark.parametrize("gravity,jump_force", [(0, -15), (-1, -15), (0.8, 0), (0.8, 5)])
def test_invalid_constants_rejected(gravity, jump_force):
    with pytest.raises(ValueError):
        PhysicsEngine(gravity=gravity, jump_force=jump_force)
