"""Tests for the simulation loop running trains on the Sawmill layout."""

import pytest

from railnet.routing.spots import Spot
from railnet.simulation.railway import EAST_STATION, MAIN_SWITCH, WEST_STATION, build_sawmill
from railnet.simulation.simulator import Simulator, SimulatorConfig
from railnet.simulation.world import ScheduledTrain, World
from railnet.track.element import SwitchState
from railnet.train.consist import StockType
from railnet.train.orders import MoveTo, SetSwitch, WaitSeconds
from railnet.train.state import Executing, SetSwitchEffect, Stopped, WaitingForOrders


MORNING_RUN = (
    SetSwitch(MAIN_SWITCH, SwitchState.REVERSE),
    MoveTo(Spot.PLATFORM),
    WaitSeconds(10),
    MoveTo(Spot.TEAM_TRACK),
)


def train_done(train_id):
    """Condition for step_until: the train has finished or failed."""
    def condition(sim):
        train = sim.get_train(train_id)
        return train is not None and not isinstance(train.train_state, Executing)
    return condition


class TestRailway:
    """Test the Sawmill railway."""
    
    def test_layout_is_valid(self):
        """Test every joint lines up."""
        railway = build_sawmill()
        
        railway.layout.validate()
        assert len(railway.layout.elements) == 8
        assert railway.layout.switches == {MAIN_SWITCH: 2}
    
    def test_spots_and_stations(self):
        """Test spots and spawn points are defined."""
        railway = build_sawmill()
        
        assert set(railway.spots) == set(Spot)
        assert set(railway.spawn_points) == {EAST_STATION, WEST_STATION}
        assert railway.spawn_points[EAST_STATION].exit_spot == Spot.WEST_TUNNEL
        assert railway.spawn_points[WEST_STATION].exit_spot == Spot.EAST_TUNNEL


class TestWorld:
    """Test world state management."""
    
    def test_world_creation(self):
        """Test world initializes correctly."""
        world = World(build_sawmill())
        
        assert world.train_count == 0
        assert world.time == 0.0
        assert world.switch_states == {MAIN_SWITCH: SwitchState.NORMAL}
    
    def test_world_time_advance(self):
        """Test time advances correctly."""
        world = World(build_sawmill())
        
        world.advance_time(0.1)
        
        assert world.time == 0.1
        assert world.frame == 1
    
    def test_clock(self):
        """Test time of day formatting."""
        world = World(build_sawmill(), start_time_s=6 * 3600)
        assert world.clock_text() == "06:00:00"
        
        world.advance_time(3661.0)
        assert world.clock_text() == "07:01:01"
        
        world.advance_time(18 * 3600.0)
        assert world.clock_text() == "01:01:01"
    
    def test_set_switch(self):
        """Test switch changes and unknown names."""
        world = World(build_sawmill())
        
        world.set_switch(MAIN_SWITCH, SwitchState.REVERSE)
        assert world.switch_states[MAIN_SWITCH] == SwitchState.REVERSE
        
        with pytest.raises(KeyError):
            world.set_switch("yard", SwitchState.REVERSE)
    
    def test_apply_effects(self):
        """Test effects fold into switch state, unknown switches are skipped."""
        world = World(build_sawmill())
        
        world.apply_effects([
            SetSwitchEffect("yard", SwitchState.REVERSE),
            SetSwitchEffect(MAIN_SWITCH, SwitchState.REVERSE),
        ])
        
        assert world.switch_states == {MAIN_SWITCH: SwitchState.REVERSE}
    
    def test_schedule_order(self):
        """Test the schedule is kept in departure order."""
        world = World(build_sawmill())
        
        world.schedule_train(ScheduledTrain(1, EAST_STATION, departure_time_s=30.0))
        world.schedule_train(ScheduledTrain(2, WEST_STATION, departure_time_s=10.0))
        
        assert [s.train_id for s in world.schedule] == [2, 1]
        
        with pytest.raises(KeyError):
            world.schedule_train(ScheduledTrain(3, "North Station"))
    
    def test_spawn_default_program(self):
        """Test a train without a program is sent to the far tunnel."""
        world = World(build_sawmill())
        
        train = world.spawn(ScheduledTrain(1, WEST_STATION))
        
        assert train.program == (MoveTo(Spot.EAST_TUNNEL),)
        assert train.position == 0.0
        assert train.route.total_length == pytest.approx(500.0)
        assert world.get_train(1) is train
    
    def test_spawn_uses_live_switches(self):
        """Test routes follow the switch position at spawn time."""
        world = World(build_sawmill())
        
        mainline = world.spawn(ScheduledTrain(1, EAST_STATION))
        world.set_switch(MAIN_SWITCH, SwitchState.REVERSE)
        siding = world.spawn(ScheduledTrain(2, EAST_STATION))
        
        assert mainline.route.element_ids == (1, 2, 3)
        assert siding.route.element_ids == (1, 2, 5, 6)
    
    def test_spawn_honours_switch_orders_before_moving(self):
        """Test switches thrown before the first move shape the route."""
        world = World(build_sawmill())
        
        train = world.spawn(ScheduledTrain(1, EAST_STATION, program=MORNING_RUN))
        
        assert train.route.ends_at_buffer_stop
        assert train.route.element_ids == (1, 2, 5, 6)
        assert world.switch_states[MAIN_SWITCH] == SwitchState.NORMAL
    
    def test_switch_orders_after_moving_ignored_at_spawn(self):
        """Test only orders ahead of the first move are considered."""
        world = World(build_sawmill())
        program = (MoveTo(Spot.PLATFORM), SetSwitch(MAIN_SWITCH, SwitchState.REVERSE))
        
        assert world.routing_states(program) == {MAIN_SWITCH: SwitchState.NORMAL}
    
    def test_spawn_due(self):
        """Test trains spawn once their departure time comes."""
        world = World(build_sawmill())
        world.schedule_train(ScheduledTrain(1, EAST_STATION, departure_time_s=1.0))
        
        assert world.spawn_due() == []
        
        world.advance_time(1.0)
        spawned = world.spawn_due()
        
        assert [t.train_id for t in spawned] == [1]
        assert world.schedule == []
    
    def test_despawn_departed(self):
        """Test trains leave once their last car is past the route end."""
        world = World(build_sawmill())
        train = world.spawn(ScheduledTrain(1, EAST_STATION, consist=(StockType.LOCOMOTIVE, StockType.BOXCAR)))
        
        train.position = 510.0
        assert world.despawn_departed() == []
        
        train.position = 535.0
        assert world.despawn_departed() == [1]
        assert world.train_count == 0
    
    def test_reset(self):
        """Test reset clears trains, schedule, switches and clock."""
        world = World(build_sawmill())
        world.spawn(ScheduledTrain(1, EAST_STATION))
        world.schedule_train(ScheduledTrain(2, WEST_STATION, departure_time_s=5.0))
        world.set_switch(MAIN_SWITCH, SwitchState.REVERSE)
        world.advance_time(1.0)
        
        world.reset()
        
        assert world.train_count == 0
        assert world.schedule == []
        assert world.switch_states[MAIN_SWITCH] == SwitchState.NORMAL
        assert world.time == 0.0


class TestSimulator:
    """Test simulator."""
    
    def test_simulator_creation(self):
        """Test simulator initializes correctly."""
        sim = Simulator()
        
        assert not sim.is_running
        assert sim.world.railway.name == "Sawmill"
        assert sim.world.clock_text() == "06:00:00"
    
    def test_default_config(self):
        """Test default configuration."""
        config = SimulatorConfig()
        
        assert config.fixed_dt == 0.05
        assert config.time_multiplier == 1
        assert config.start_time_s == 6 * 3600
    
    def test_step_requires_start(self):
        """Test stepping before start."""
        sim = Simulator()
        with pytest.raises(RuntimeError):
            sim.step()
    
    def test_simulation_step(self):
        """Test single simulation step."""
        sim = Simulator()
        sim.start()
        
        sim.step()
        
        assert sim.time == pytest.approx(0.05)
        assert sim.world.frame == 1
    
    def test_zero_step(self):
        """Test an explicit zero time step does not advance the clock."""
        sim = Simulator()
        sim.start()
        
        sim.step(0.0)
        
        assert sim.time == 0.0
        assert sim.world.frame == 1
    
    def test_time_multiplier(self):
        """Test the multiplier scales the step."""
        sim = Simulator()
        sim.start()
        
        sim.set_time_multiplier(4)
        sim.step()
        assert sim.time == pytest.approx(0.2)
        
        sim.set_time_multiplier(8)
        sim.step()
        assert sim.time == pytest.approx(0.6)
    
    def test_invalid_multiplier(self):
        """Test only 1x, 2x, 4x and 8x are accepted."""
        with pytest.raises(ValueError):
            Simulator(config=SimulatorConfig(time_multiplier=3))
        
        sim = Simulator()
        with pytest.raises(ValueError):
            sim.set_time_multiplier(16)
    
    def test_max_dt(self):
        """Test long steps are capped."""
        sim = Simulator()
        sim.start()
        
        sim.step(dt=2.0)
        
        assert sim.time == pytest.approx(sim.config.max_dt)
    
    def test_pause(self):
        """Test paused simulation does not advance."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION))
        sim.start()
        sim.pause()
        
        trains = sim.step()
        
        assert trains == []
        assert sim.time == 0.0
        assert sim.is_paused
        
        sim.resume()
        sim.step()
        assert len(sim.trains) == 1
    
    def test_post_step_callback(self):
        """Test callbacks receive the simulator and time step."""
        sim = Simulator()
        calls = []
        sim.add_post_step_callback(lambda s, dt: calls.append(dt))
        sim.start()
        
        sim.step()
        sim.step()
        
        assert calls == pytest.approx([0.05, 0.05])
    
    def test_switch_effects_reach_world(self):
        """Test switch orders change the live switch."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION, program=(SetSwitch(MAIN_SWITCH, SwitchState.REVERSE),)))
        sim.start()
        
        sim.step()
        
        assert sim.world.switch_states[MAIN_SWITCH] == SwitchState.REVERSE
        assert sim.get_train(1).train_state == WaitingForOrders()
    
    def test_get_state(self):
        """Test state dictionary."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION))
        sim.start()
        sim.step()
        
        state = sim.get_state()
        
        assert state["running"]
        assert state["world"]["clock"] == "06:00:00"
        assert state["world"]["switches"] == {MAIN_SWITCH: "Normal"}
        assert len(state["world"]["trains"]) == 1
    
    def test_reset(self):
        """Test reset stops the simulation and clears the world."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION))
        sim.start()
        sim.step()
        
        sim.reset()
        
        assert not sim.is_running
        assert sim.trains == []
        assert sim.time == 0.0


class TestScenarios:
    """End-to-end runs on the Sawmill."""
    
    def test_morning_run(self):
        """Test platform stop then team track with the switch reversed."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION, program=MORNING_RUN))
        sim.start()
        
        steps = sim.step_until(train_done(1), max_steps=5000)
        train = sim.get_train(1)
        
        assert steps < 5000
        assert train.train_state == WaitingForOrders()
        assert train.program_counter == len(MORNING_RUN)
        assert train.speed == 0.0
        assert train.position == pytest.approx(train.route.total_length - 80.0)
        assert sim.world.switch_states[MAIN_SWITCH] == SwitchState.REVERSE
    
    def test_forgot_switch(self):
        """Test the platform is unreachable on the mainline."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION, program=(MoveTo(Spot.PLATFORM),)))
        sim.start()
        
        sim.step()
        train = sim.get_train(1)
        
        assert train.train_state == Stopped("Cannot reach Platform")
        assert train.speed == 0.0
    
    def test_route_not_rebuilt(self):
        """Test throwing the switch does not reroute a running train."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION))
        sim.start()
        sim.step()
        
        sim.world.set_switch(MAIN_SWITCH, SwitchState.REVERSE)
        sim.step()
        
        assert sim.get_train(1).route.element_ids == (1, 2, 3)
    
    def test_through_trains_leave(self):
        """Test trains from both stations run through and despawn."""
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION))
        sim.schedule_train(ScheduledTrain(
            2,
            WEST_STATION,
            departure_time_s=5.0,
            consist=(StockType.LOCOMOTIVE, StockType.PASSENGER_CAR, StockType.PASSENGER_CAR),
        ))
        sim.set_time_multiplier(4)
        sim.start()
        
        steps = sim.step_until(
            lambda s: not s.world.schedule and s.world.train_count == 0,
            max_steps=5000,
        )
        
        assert steps < 5000
        assert sim.trains == []
        assert sim.time > 5.0
