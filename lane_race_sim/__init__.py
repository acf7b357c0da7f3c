"""
Lane Race Simulator

Core modules:
- config: simulation configuration and policy vocabulary
- models: positions, entities, scripted commands
- entities: the entity set (arena storage) and per-kind advance rules
- controller: per-actor scripted command queues
- collision: actor/obstacle collision detection
- engine: tick orchestration and termination
- trace: helpers for producing per-tick snapshots (no behavior changes)
"""
