"""HTTP primitives shared by the routing layer."""
