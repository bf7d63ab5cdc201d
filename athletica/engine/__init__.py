"""
Pure engines of the workout session subsystem.

* ``state_machine``: session lifecycle and exercise/set flow
* ``analytics``: live stats, performance score, completion summary
* ``adaptive``: rest time, exercise recommendations, 1RM, metric learning
* ``achievements``: declarative achievement rules
* ``cache`` / ``scheduling``: live-stat memoization and refresh cadence
"""
