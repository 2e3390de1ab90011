from __future__ import annotations

# =============================================================================
# EXIT CODES
# =============================================================================
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1                  # bad/missing configuration, updater failures
EXIT_ABORTED = 2                       # --fail-fast stopped the batch
EXIT_INTERRUPTED = 130                 # Ctrl-C

# =============================================================================
# BATCH RUNNER
# =============================================================================
BATCHRUN_USAGE = """\
USAGE: batchrun -c command [-i inputfolder] [-o outputfolder] [-f format] [-s suffix] [-p path2imagemagick]
                [-t seconds] [--fail-fast] [--dry-run] [--json] [--log-level level]
USAGE: batchrun [-h or -help]

-c .... command ........... command (script and its own arguments) to run once per
                            image, WITHOUT the input and output file names; quote
                            it as a whole; arguments inside it may be quoted too,
                            e.g. -c "im-vintage3 -c 'rgb(255,0,0)'"
-i .... inputfolder ....... folder holding the images to process; default is the
                            current directory
-o .... outputfolder ...... folder receiving the results; created if missing;
                            default is the input folder
-f .... format ............ comma or space separated list of extensions (or any
                            substring of the file name) to process, case
                            insensitive, e.g. "jpg,png"; default is every file
-s .... suffix ............ extension for every output file, without the dot;
                            default is each input file's own extension
-p .... path2imagemagick .. folder prepended to PATH so the command (and the
                            ImageMagick tools it calls) are found there first
-t .... seconds ........... kill and count as failed any invocation running
                            longer than this; default is no limit
--fail-fast ............... stop at the first failing invocation (exit code 2)
--dry-run ................. log the invocations without running them
--json .................... print a JSON summary line on stdout when done
--log-level ............... DEBUG, INFO, WARNING or ERROR

Each image is processed as:  command <inputfolder>/<image> <outputfolder>/<imgname>.<suffix>
Failures of single invocations are reported in the summary and do not change the
exit code unless --fail-fast is given.
"""

# =============================================================================
# SCRIPT UPDATER
# =============================================================================
# Placeholder substituted (URL-encoded) in the download URL template
SCRIPT_PLACEHOLDER = "{script}"
# rwxr-xr-x for downloaded scripts
SCRIPT_FILE_MODE = 0o755

# =============================================================================
# UI
# =============================================================================
RESULTS_DIR = "im_batch_runs"
LOCK_FILENAME = "batch.lock"
