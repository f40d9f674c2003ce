"""feedpusher reporting: Rich rendering of plans and run outcomes.

Modules
-------
renderer
    ``PlanRenderer`` turns a ``PublicationPlan`` and a ``RunOutcome`` into
    Rich panels for terminal display.
"""
