from .layer import (Parcel, FluidSegment, blend, stack_volume, stack_mass, merge_adjacent, push_top, push_bottom,
                    take_bottom, take_top, spill_top, layout, segment_pressure, serialize_layers, deserialize_layers,
                    LAYER_FORMAT_VERSION)
