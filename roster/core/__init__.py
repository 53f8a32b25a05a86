"""Core building blocks shared by the repositories and the query layer."""
