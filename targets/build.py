"""build a target into an output directory"""
add_flag("v", "verbose", "list every file as it is built", 0)
add_flag("o", "out", "output directory", 1, "path", "string", "directory receiving the build")
add_flag("j", "jobs", "number of parallel jobs", 2, "count", "int", "how many jobs to run")
add_argument("target", "string", "what to build")
add_argument("extra", "string...", "additional build arguments")

options = {"verbose": False, "out": ".", "jobs": 1}


def flag_name_verbose():
    options["verbose"] = True


def flag_name_out(path):
    options["out"] = path


def flag_name_jobs(count):
    options["jobs"] = int(count)


def target_build(target, *extra):
    print("building %s into %s with %d job(s)" % (target, options["out"], options["jobs"]))
    if options["verbose"] and extra:
        print("extra arguments: %s" % " ".join(extra))
