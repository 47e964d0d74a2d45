#!/usr/bin/env python3
"""
Morning Run Example

This example demonstrates how to:
1. Build the Sawmill layout and inspect its routes
2. Write a train program that stops at the platform and the team track
3. Schedule trains from both stations and run the simulator
4. Watch a train stop when its program sends it somewhere it cannot go

Run with: python run_morning_run.py
"""

import logging

from railnet import Simulator, build_route, build_sawmill
from railnet.routing import Spot, position_on_route
from railnet.simulation import EAST_STATION, MAIN_SWITCH, WEST_STATION, ScheduledTrain
from railnet.track import SwitchState
from railnet.train import Executing, MoveTo, SetSwitch, StockType, WaitSeconds, describe_order


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    
    print("=" * 60)
    print("RailNet Morning Run Example")
    print("=" * 60)
    
    # Step 1: Inspect the layout
    print("\n1. Building the Sawmill...")
    railway = build_sawmill()
    for state in SwitchState:
        route = build_route(0, 0, state, railway.layout)
        end = "buffer stop" if route.ends_at_buffer_stop else "portal"
        print(f"   From {EAST_STATION}, switch {state.value}: "
              f"{route.total_length:.1f} m through elements {list(route.element_ids)} to a {end}")
    
    # Step 2: Write the program
    print("\n2. Train 1 program:")
    program = (
        SetSwitch(MAIN_SWITCH, SwitchState.REVERSE),
        MoveTo(Spot.PLATFORM),
        WaitSeconds(10),
        MoveTo(Spot.TEAM_TRACK),
    )
    for index, order in enumerate(program):
        print(f"   {index}: {describe_order(order)}")
    
    # Step 3: Schedule trains
    print("\n3. Scheduling trains...")
    sim = Simulator(railway)
    sim.schedule_train(ScheduledTrain(
        1,
        EAST_STATION,
        consist=(StockType.LOCOMOTIVE, StockType.FLATBED, StockType.BOXCAR),
        program=program,
    ))
    sim.schedule_train(ScheduledTrain(2, WEST_STATION, departure_time_s=90.0))
    sim.schedule_train(ScheduledTrain(
        3,
        WEST_STATION,
        departure_time_s=120.0,
        program=(MoveTo(Spot.PLATFORM),),
    ))
    
    # Step 4: Run at 4x
    print("\n4. Running simulation at 4x...")
    sim.set_time_multiplier(4)
    sim.start()
    
    def report(sim, dt):
        if sim.world.frame % 100 == 0:
            for train in sim.trains:
                pose = position_on_route(train.position, train.route)
                where = f"({pose.position[0]:.0f}, {pose.position[1]:.0f})" if pose else "in tunnel"
                print(f"   {sim.world.clock_text()} train {train.train_id}: "
                      f"{train.position:6.1f} m {where}, {train.speed * 3.6:4.1f} km/h")
    
    sim.add_post_step_callback(report)
    sim.step_until(
        lambda s: not s.world.schedule and all(not isinstance(t.train_state, Executing) for t in s.trains),
        max_steps=20000,
    )
    
    # Step 5: Final state
    print(f"\n5. Final state at {sim.world.clock_text()}:")
    for train in sim.trains:
        state = train.get_state()
        print(f"   Train {state['train_id']}: {state['status']} at {state['position_m']:.1f} m")
    print(f"   Switch {MAIN_SWITCH}: {sim.world.switch_states[MAIN_SWITCH].value}")
    
    print("\n" + "=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
