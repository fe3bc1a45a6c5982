from ssm_env.cli import main

raise SystemExit(main())
