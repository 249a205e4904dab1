from .pressure import hydrostatic_pressure, required_surface_pressure, equivalent_density, pressure_balance, PressureWindow
