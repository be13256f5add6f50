"""Cross-cutting helpers: UTC time and the per-request principal."""
