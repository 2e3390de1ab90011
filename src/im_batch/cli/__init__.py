# CLI entry points for im_batch
