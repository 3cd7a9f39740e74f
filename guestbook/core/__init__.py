"""
Shared, cross-cutting code for the backend.

`core/` should contain small building blocks that multiple features use
(DB wiring, bootstrap, settings, logging, CORS, metrics). Keep
feature-specific SQL and business logic in the corresponding feature
package (e.g. `submissions/`).
"""
