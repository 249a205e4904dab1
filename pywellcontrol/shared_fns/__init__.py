from .shared_fns import pressure_from_head, density_from_pressure, root_solve, convert_to_numpy, process_output, is_finite_number, march_depths
