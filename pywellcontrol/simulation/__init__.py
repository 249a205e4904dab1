from .simulation import SimulationRun, run_simulation, run_batch, compare_runs
