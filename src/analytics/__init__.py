"""Pure, synchronous reductions over one user's entry list."""
