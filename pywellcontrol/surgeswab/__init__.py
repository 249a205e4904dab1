from .surgeswab import clinging_constant, displacement_area, surge_swab_at_depth, surge_swab, surge_swab_summary
