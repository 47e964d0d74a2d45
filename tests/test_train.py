"""Tests for orders, rolling stock, train physics and train state."""

import pytest

from railnet.routing.route import Route
from railnet.routing.spots import Spot
from railnet.track.element import SwitchState
from railnet.train.consist import StockType, consist_length
from railnet.train.orders import (
    Couple,
    MoveTo,
    ReverserPosition,
    SetReverser,
    SetSwitch,
    Uncouple,
    WaitSeconds,
    describe_order,
)
from railnet.train.physics import PhysicsConfig, TrainPhysics
from railnet.train.state import ActiveTrain, Executing, Stopped


class TestDescribeOrder:
    """Test order descriptions."""
    
    def test_move_to(self):
        """Test spot names are used."""
        assert describe_order(MoveTo(Spot.PLATFORM)) == "Move To Platform"
        assert describe_order(MoveTo(Spot.TEAM_TRACK)) == "Move To Team Track"
    
    def test_reverser(self):
        """Test reverser positions."""
        assert describe_order(SetReverser(ReverserPosition.FORWARD)) == "Set Reverser Forward"
        assert describe_order(SetReverser(ReverserPosition.REVERSE)) == "Set Reverser Reverse"
    
    def test_switch(self):
        """Test switch positions use player-facing names."""
        assert describe_order(SetSwitch("main", SwitchState.NORMAL)) == "Set main Normal"
        assert describe_order(SetSwitch("main", SwitchState.REVERSE)) == "Set main Diverging"
    
    def test_wait(self):
        """Test whole and fractional waits."""
        assert describe_order(WaitSeconds(10)) == "Wait 10 seconds"
        assert describe_order(WaitSeconds(10.0)) == "Wait 10 seconds"
        assert describe_order(WaitSeconds(2.5)) == "Wait 2.5 seconds"
    
    def test_coupling(self):
        """Test coupling orders."""
        assert describe_order(Couple()) == "Couple"
        assert describe_order(Uncouple()) == "Uncouple 1 car"
        assert describe_order(Uncouple(3)) == "Uncouple 3 cars"
    
    def test_unknown(self):
        """Test non-orders are rejected."""
        with pytest.raises(TypeError):
            describe_order("Move To Platform")
    
    def test_orders_are_values(self):
        """Test orders compare by value."""
        assert MoveTo(Spot.PLATFORM) == MoveTo(Spot.PLATFORM)
        assert Couple() == Couple()
        assert WaitSeconds(5) != WaitSeconds(6)


class TestConsist:
    """Test rolling stock."""
    
    def test_lengths(self):
        """Test body lengths."""
        assert StockType.LOCOMOTIVE.length == 20.0
        assert StockType.PASSENGER_CAR.length == 25.0
        assert StockType.FLATBED.length == 15.0
        assert StockType.BOXCAR.length == 15.0
    
    def test_display_names(self):
        """Test player-facing names."""
        assert StockType.PASSENGER_CAR.display_name == "Passenger Car"
    
    def test_consist_length(self):
        """Test consist lengths add up."""
        assert consist_length([]) == 0.0
        assert consist_length([StockType.LOCOMOTIVE, StockType.BOXCAR, StockType.BOXCAR]) == 50.0


class TestTrainPhysics:
    """Test train physics."""
    
    def test_defaults(self):
        """Test default limits."""
        config = PhysicsConfig()
        
        assert config.acceleration == 2.0
        assert config.braking == 3.0
        assert config.emergency_braking == 5.0
        assert config.max_speed == pytest.approx(11.11)
        assert config.arrival_threshold == 0.5
    
    def test_braking_distance(self):
        """Test v^2 / 2a."""
        physics = TrainPhysics()
        
        assert physics.calculate_braking_distance(6.0) == pytest.approx(6.0)
        assert physics.calculate_braking_distance(10.0, 5.0) == pytest.approx(10.0)
        assert physics.calculate_braking_distance(0.0) == 0.0
        assert physics.calculate_braking_distance(1.0, 0.0) == float('inf')
    
    def test_emergency_stop_distance(self):
        """Test consist length is added to the emergency braking distance."""
        physics = TrainPhysics()
        assert physics.emergency_stop_distance(10.0, 30.0) == pytest.approx(40.0)
    
    def test_speed_limits(self):
        """Test speed stays within [0, max_speed]."""
        physics = TrainPhysics()
        
        assert physics.accelerate(11.0, 1.0) == pytest.approx(11.11)
        assert physics.accelerate(0.0, 0.1) == pytest.approx(0.2)
        assert physics.brake(0.1, 1.0) == 0.0
        assert physics.emergency_brake(5.0, 0.1) == pytest.approx(4.5)
        assert physics.emergency_brake(0.2, 0.1) == 0.0
    
    def test_trapezoid_integration(self):
        """Test position uses the mean of old and new speed."""
        physics = TrainPhysics()
        
        assert physics.integrate_position(10.0, 2.0, 4.0, 1.0, 0.5) == pytest.approx(11.5)
        assert physics.integrate_position(10.0, 2.0, 4.0, -1.0, 0.5) == pytest.approx(8.5)


class TestActiveTrain:
    """Test the active train record."""
    
    def test_defaults(self):
        """Test a new train starts executing at the route start."""
        train = ActiveTrain(train_id=1, route=Route())
        
        assert train.position == 0.0
        assert train.speed == 0.0
        assert train.program_counter == 0
        assert train.train_state == Executing()
        assert train.reverser == ReverserPosition.FORWARD
    
    def test_derived_values(self):
        """Test direction, current order and rear position."""
        program = (MoveTo(Spot.PLATFORM), Couple())
        train = ActiveTrain(
            train_id=1,
            route=Route(),
            consist=(StockType.LOCOMOTIVE, StockType.FLATBED),
            program=program,
            position=100.0,
            reverser=ReverserPosition.REVERSE,
        )
        
        assert train.direction == -1.0
        assert train.consist_length == 35.0
        assert train.rear_position == 65.0
        assert train.current_order == program[0]
        
        train.program_counter = 2
        assert train.current_order is None
    
    def test_get_state(self):
        """Test state dictionary."""
        train = ActiveTrain(
            train_id=4,
            route=Route(),
            consist=(StockType.LOCOMOTIVE,),
            train_state=Stopped("Cannot reach Platform"),
        )
        
        state = train.get_state()
        
        assert state["train_id"] == 4
        assert state["status"] == "Stopped: Cannot reach Platform"
        assert state["consist"] == ["Locomotive"]
