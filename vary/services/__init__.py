"""Application services: changesets shortcuts and the napi release pipeline."""
