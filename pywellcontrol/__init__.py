"""
pywellcontrol
===================================

------------------------------------------------
A collection of Trip Hydraulics Well Control Utilities
------------------------------------------------

Functions and classes for the hydraulic consequences of moving pipe in and out of a wellbore.
Each concern lives in its own module, requiring seperate imports

Includes functions to perform calculations including;

- Bingham and power law fits of Fann dial readings, annular friction with regime selection
- Surge and swab pressures with clinging constant, pipe end and eccentricity effects
- Depth marching trip out / trip in simulation of string, annulus and pocket fluid layers
- Surface back pressure (or choke) required to hold a target density at a control depth
- Float valve crack pressure behaviour and initial U-tube equalization
- Kill mud density and slug plan for pulling out of hole
- Content hashed snapshots of simulation inputs for staleness checks


"""

submodules = [
    'classes',
    'constants',
    'geometry',
    'layer',
    'optimizer',
    'pressure',
    'rheology',
    'shared_fns',
    'simulation',
    'snapshot',
    'surgeswab',
    'trip',
    'validate'
]

__all__ = submodules 

import importlib

def __dir__():
    return __all__


def __getattr__(name):
    if name in submodules:
        return importlib.import_module(f'pywellcontrol.{name}')
    else:
        try:
            return globals()[name]
        except KeyError:
            raise AttributeError(
                f"Module 'pywellcontrol' has no attribute '{name}'"
            )
