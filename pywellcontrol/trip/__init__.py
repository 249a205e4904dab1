from .trip import (TripSettings, FloatValve, SimulationStep, TripState, initial_state, drain_string, equalize,
                   pull_step, run_step, simulate_trip)
