from .classes import pipe_end, trip_mode, flow_regime, side, float_state, lookup_status, class_dic
