from .geometry import DrillStringSection, AnnulusSection, SectionLookup, find_section, SurveyStation, TvdSampler, Wellbore
