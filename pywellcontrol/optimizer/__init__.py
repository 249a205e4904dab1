from .optimizer import OptimizerResult, find_heel, optimize_kill_mud
