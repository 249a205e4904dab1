from .rheology import (power_law_fit, bingham_fit, Mud, wall_shear_stress, hydraulic_diameter, wall_shear_rate,
                       reynolds_number, hedstrom_number, critical_reynolds, annular_friction)
