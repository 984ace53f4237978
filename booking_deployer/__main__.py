from booking_deployer.setup.cli import main

raise SystemExit(main())
