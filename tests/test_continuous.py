"""
Tests for the Continuous Control Filter
=======================================
"""

import pytest
import numpy as np

from handworlds.control.continuous import ContinuousControlFilter, ControlConfig
from handworlds.core.types import ContinuousControlState, ViewState
from handworlds.world.scene import OrbitRig
from tests.conftest import make_open_hand, make_pinch_hand


@pytest.fixture
def control():
    return ContinuousControlFilter(ContinuousControlState())


@pytest.fixture
def rig():
    return OrbitRig(ViewState([0.0, -200.0, 350.0], [0.0, 0.0, 0.0]))


class TestControlConfig:

    def test_defaults(self):
        cfg = ControlConfig()
        assert cfg.position_smoothing == 0.2
        assert cfg.pan_sensitivity == 140.0
        assert cfg.pan_dead_zone == 0.18
        assert cfg.zoom_speed_in == 36.0
        assert cfg.zoom_speed_out == 24.0

    def test_from_dict_ignores_unknown_keys(self):
        cfg = ControlConfig.from_dict({"pan_sensitivity": 100.0, "max_tick_seconds": 0.05})
        assert cfg.pan_sensitivity == 100.0


class TestZoomIntent:

    @pytest.mark.parametrize("pinch, expected", [
        (0.0, 1.0),
        (0.0475, 0.5),
        (0.07, 0.0),
        (0.10, 0.0),
        (0.15, 0.0),
        (0.22, -0.5),
        (0.40, -1.0),
    ])
    def test_intent(self, control, pinch, expected):
        assert control.zoom_intent(pinch) == pytest.approx(expected)


class TestLandmarkUpdate:

    def test_first_sighting(self, control):
        control.update(make_open_hand())
        st = control.state
        assert st.active
        assert st.smoothed_pos == pytest.approx((0.5, 0.8))
        assert st.previous_pos == st.smoothed_pos
        assert np.all(st.pan_target == 0.0)

    def test_motion_builds_pan_target(self, control):
        control.update(make_open_hand())
        control.update(make_open_hand(dx=0.01))
        st = control.state
        # smoothed moves 0.2 * 0.01, times 140 = 0.28, eased by 0.35
        assert st.smoothed_pos[0] == pytest.approx(0.502)
        assert st.pan_target[0] == pytest.approx(0.28 * 0.35)
        assert st.pan_target[1] == 0.0

    def test_dead_zone(self, control):
        control.update(make_open_hand())
        control.update(make_open_hand(dx=0.005))
        assert control.state.pan_target[0] == 0.0

    def test_zoom_target_from_pinch(self, control):
        control.update(make_pinch_hand(0.0))
        assert control.state.zoom_target == pytest.approx(1.0)
        control.update(make_pinch_hand(0.40))
        assert control.state.zoom_target == pytest.approx(-1.0)

    def test_hand_absent_resets(self, control):
        control.update(make_open_hand())
        control.update(make_open_hand(dx=0.05))
        control.state.pan_velocity = np.array([1.0, 1.0])
        control.update(None)
        st = control.state
        assert not st.active
        assert st.smoothed_pos is None
        assert st.previous_pos is None
        assert np.all(st.pan_target == 0.0)
        assert st.zoom_target == 0.0

    def test_malformed_hand_is_absent(self, control):
        control.update(make_open_hand())
        control.update(make_open_hand()[:5])
        assert not control.state.active


class TestRenderTick:

    def test_velocity_eases_toward_target(self, control):
        st = control.state
        st.active = True
        st.pan_target = np.array([1.0, 0.0])
        st.zoom_target = 1.0
        control.step_velocities()
        assert st.pan_velocity[0] == pytest.approx(0.12)
        assert st.zoom_velocity == pytest.approx(0.12)

    def test_velocity_decays_when_inactive(self, control):
        st = control.state
        st.pan_velocity = np.array([1.0, -1.0])
        st.zoom_velocity = 1.0
        control.step_velocities()
        assert st.pan_velocity == pytest.approx([0.92, -0.92])
        assert st.zoom_velocity == pytest.approx(0.92)

    def test_zoom_in_moves_camera_closer(self, control, rig):
        st = control.state
        st.active = True
        st.zoom_target = 1.0
        before = rig.distance_to_target()
        control.apply(1.0 / 60.0, rig, 50.0, 2000.0)
        assert rig.distance_to_target() == pytest.approx(before - 0.12 * 36.0)

    def test_zoom_out_uses_slower_speed(self, control, rig):
        st = control.state
        st.active = True
        st.zoom_target = -1.0
        before = rig.distance_to_target()
        control.apply(1.0 / 60.0, rig, 50.0, 2000.0)
        assert rig.distance_to_target() == pytest.approx(before + 0.12 * 24.0)

    def test_speed_is_capped(self, control, rig):
        st = control.state
        st.active = True
        st.zoom_target = 1.0
        before = rig.distance_to_target()
        control.apply(0.5, rig, 50.0, 2000.0)
        assert rig.distance_to_target() == pytest.approx(before - 0.12 * 2.0 * 36.0)

    def test_zoom_in_clamps_at_min_distance(self, control, rig):
        rig.set_distance(52.0)
        st = control.state
        st.active = True
        st.zoom_target = 1.0
        control.apply(1.0 / 60.0, rig, 50.0, 2000.0)
        assert rig.distance_to_target() == pytest.approx(50.0)

    def test_zoom_out_settles_on_max_distance(self, control, rig):
        rig.set_distance(399.0)
        st = control.state
        st.active = True
        st.zoom_target = -1.0
        for _ in range(10):
            control.apply(1.0 / 60.0, rig, 50.0, 400.0)
        assert rig.distance_to_target() == pytest.approx(400.0)

    def test_at_limit_no_movement(self, control, rig):
        rig.set_distance(400.0)
        st = control.state
        st.active = True
        st.zoom_target = -1.0
        before = rig.get_view_state()
        control.apply(1.0 / 60.0, rig, 50.0, 400.0)
        np.testing.assert_allclose(rig.get_view_state().position, before.position)

    def test_pan_moves_camera_and_target_together(self, control, rig):
        st = control.state
        st.active = True
        st.pan_target = np.array([10.0, 5.0])
        before = rig.get_view_state()
        control.apply(1.0 / 60.0, rig, 50.0, 2000.0)
        after = rig.get_view_state()
        shift = after.position - before.position
        np.testing.assert_allclose(after.target - before.target, shift)
        assert np.linalg.norm(shift) > 0
        assert after.distance == pytest.approx(before.distance)

    def test_inactive_does_not_move_camera(self, control, rig):
        st = control.state
        st.pan_velocity = np.array([5.0, 5.0])
        st.zoom_velocity = 1.0
        before = rig.get_view_state()
        control.apply(1.0 / 60.0, rig, 50.0, 2000.0)
        np.testing.assert_allclose(rig.get_view_state().position, before.position)
