"""Build and release orchestration for multi-repository TypeScript projects."""
