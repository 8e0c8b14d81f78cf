"""
Announcer side of the darkroom timer.

Turns countdown ticks and step phrases into speech requests and light
changes. Speech rendering, audio playback and light hardware are external;
this package only defines their interfaces plus logging stand-ins.
"""
