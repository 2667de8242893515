"""rescache: resource cache query engine.

Resolves cloud-resource identifiers (images, instances, load balancers)
against a namespaced, relationship-bearing cache, and searches provider
collections with first-match and aggregate-not-found semantics.
"""

__version__ = "0.1.0"
