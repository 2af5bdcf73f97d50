"""workspace-bump: dependency-aware version bumps for npm-style monorepos."""
